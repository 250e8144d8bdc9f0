"""
Pydantic schemas for converting a selected applicant into a user account.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, PrivateAttr

from hr_pipeline.schemas.base import BackendModel, PassthroughModel


class UserType(str, Enum):
    """Account category a converted applicant receives."""

    EXECUTIVE = "executive"
    ADMIN = "admin"


class RoleClassification(BackendModel):
    """Outcome of classifying a free-text job title."""

    user_type: UserType
    normalized_title: str
    matched_keyword: Optional[str] = None
    low_confidence: bool = False


class ManagerCandidate(PassthroughModel):
    """Active manager that may supervise a new account."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    role_level: Optional[int] = None


class CallerProfile(PassthroughModel):
    """Profile of the signed-in operator, fetched fresh for authorization."""

    user_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("userId", "user_id", "_id"),
    )
    name: str = ""
    email: Optional[str] = None
    role_level: Optional[int] = None
    root_id: Optional[str] = None

    _raw: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_backend(cls, payload: Dict[str, Any]) -> "CallerProfile":
        profile = cls.model_validate(payload)
        profile._raw = dict(payload)
        return profile

    def to_backend(self) -> Dict[str, Any]:
        """The profile exactly as the backend produced it, for echoing back."""
        if self._raw:
            return dict(self._raw)
        return self.model_dump(by_alias=True, exclude_none=True)


class ConversionRequest(BackendModel):
    """Arguments of the remote convertApplicationToUser mutation."""

    application_id: str
    user_type: UserType
    manager_id: str
    job_title: str
    role_level: Optional[int] = None
    hierarchy_id: Optional[str] = None
    caller_profile: Dict[str, Any]


class ConversionResult(PassthroughModel):
    """Backend response for a conversion, returned to the caller unchanged."""

    success: bool
    setup_link: Optional[str] = None
    user_type: UserType
    assigned_ward_ids: Optional[List[str]] = None


class ConversionOutcome(BackendModel):
    """Conversion result plus how the job title and user type were derived."""

    result: ConversionResult
    job_title: str
    job_title_inferred: bool = False
    classification: RoleClassification
    manager_id: str
