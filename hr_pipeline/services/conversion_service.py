"""
Conversion of a selected applicant into a system user account.

Steps: authorize the caller against a fresh profile, classify the job title,
pick a supervising manager, then submit the remote conversion. Nothing is
mutated locally, so a failure at any step leaves the board untouched and the
error reaches the caller as raised.
"""

import logging
from typing import List, Optional, Tuple

from hr_pipeline.core.config import settings
from hr_pipeline.core.permissions import raise_if_below_level
from hr_pipeline.errors import NoManagersAvailable, PermissionDenied, ValidationError
from hr_pipeline.repositories.base import UserBackend
from hr_pipeline.schemas.conversion import (
    CallerProfile,
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    ManagerCandidate,
    RoleClassification,
    UserType,
)
from hr_pipeline.schemas.pipeline import CandidateApplication, Stage
from hr_pipeline.services.role_classifier import classify_job_title
from hr_pipeline.services.transition_executor import coerce_stage

logger = logging.getLogger(__name__)

# Backend fields that may carry the job title, in order of preference
JOB_TITLE_FIELDS: Tuple[str, ...] = ("jobLevel", "position", "role", "positionTitle")
FALLBACK_JOB_TITLE = "Executive"


def resolve_job_title(candidate: CandidateApplication) -> Tuple[str, bool]:
    """
    Pick the job title used for conversion.

    Returns (title, inferred); ``inferred`` is True when no field carried a
    title and the fallback was used.
    """
    if candidate.job_title:
        return candidate.job_title, False
    for name in JOB_TITLE_FIELDS:
        value = candidate.extra_field(name)
        if isinstance(value, str) and value.strip():
            return value, False
    logger.warning(
        "Application %s has no job title; using fallback %r",
        candidate.id,
        FALLBACK_JOB_TITLE,
    )
    return FALLBACK_JOB_TITLE, True


def ensure_convertible(candidate: CandidateApplication, stage: "Stage | str") -> None:
    """Raise ValidationError unless the application can be converted."""
    stage = coerce_stage(stage)
    if stage != Stage.SELECTED:
        raise ValidationError(
            "Only selected candidates can be converted to users",
            {"application_id": candidate.id, "stage": stage.value},
        )
    if candidate.is_converted:
        raise ValidationError(
            f"{candidate.candidate_name} has already been converted to a user account",
            {"application_id": candidate.id, "converted_to_user_id": candidate.converted_to_user_id},
        )


class ConversionWorkflow:
    """Orchestrates authorization, classification, manager choice, and submission."""

    def __init__(
        self,
        backend: UserBackend,
        min_role_level: Optional[int] = None,
        district_manager_level: Optional[int] = None,
        admin_role_level: Optional[int] = None,
        manager_lookup_limit: Optional[int] = None,
    ):
        self.backend = backend
        self.min_role_level = settings.CONVERSION_MIN_ROLE_LEVEL if min_role_level is None else min_role_level
        self.district_manager_level = (
            settings.DISTRICT_MANAGER_ROLE_LEVEL if district_manager_level is None else district_manager_level
        )
        self.admin_role_level = settings.ADMIN_ROLE_LEVEL if admin_role_level is None else admin_role_level
        self.manager_lookup_limit = (
            settings.MANAGER_LOOKUP_LIMIT if manager_lookup_limit is None else manager_lookup_limit
        )

    async def authorize(self) -> CallerProfile:
        """Fetch the caller profile and check its role level."""
        profile = await self.backend.get_current_user_profile()
        if profile is None:
            raise PermissionDenied("Permission Denied: No signed-in profile")
        logger.debug("Caller profile %s at role level %s", profile.name, profile.role_level)
        raise_if_below_level(profile.role_level, self.min_role_level, "convert applications to users")
        return profile

    def choose_manager(self, managers: List[ManagerCandidate], user_type: UserType) -> ManagerCandidate:
        """
        Executives go to a district-level manager when one is listed;
        everyone else, and executives without one, go to the first manager.
        """
        if not managers:
            raise NoManagersAvailable("No active managers found. Please assign a manager first.")
        if user_type == UserType.EXECUTIVE:
            for manager in managers:
                if manager.role_level == self.district_manager_level:
                    return manager
        return managers[0]

    async def select_manager(self, user_type: UserType) -> ManagerCandidate:
        managers = await self.backend.list_admins(is_active=True, num_items=self.manager_lookup_limit)
        manager = self.choose_manager(managers[: self.manager_lookup_limit], user_type)
        logger.info(
            "Assigning %s account to manager %s (role level %s)",
            user_type.value,
            manager.id,
            manager.role_level,
        )
        return manager

    async def convert(self, application_id: str, job_title: str) -> ConversionOutcome:
        """Convert an application using an already-resolved job title."""
        profile = await self.authorize()

        classification: RoleClassification = classify_job_title(job_title)
        logger.info(
            "Classified job title %r as %s%s",
            job_title,
            classification.user_type.value,
            " (low confidence)" if classification.low_confidence else "",
        )

        manager = await self.select_manager(classification.user_type)

        request = ConversionRequest(
            application_id=application_id,
            user_type=classification.user_type,
            manager_id=manager.id,
            job_title=job_title,
            role_level=self.admin_role_level if classification.user_type == UserType.ADMIN else None,
            hierarchy_id=None,
            caller_profile=profile.to_backend(),
        )
        result: ConversionResult = await self.backend.convert_application_to_user(request)
        logger.info("Application %s converted: success=%s", application_id, result.success)

        return ConversionOutcome(
            result=result,
            job_title=job_title,
            classification=classification,
            manager_id=manager.id,
        )

    async def convert_candidate(self, candidate: CandidateApplication, stage: "Stage | str") -> ConversionOutcome:
        """Check the card is convertible, resolve its job title, and convert it."""
        ensure_convertible(candidate, stage)
        job_title, inferred = resolve_job_title(candidate)
        outcome = await self.convert(candidate.id, job_title)
        outcome.job_title_inferred = inferred
        return outcome
