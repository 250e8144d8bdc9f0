"""
User repository - caller profile, manager directory, and account creation.
"""

from typing import List, Optional

from hr_pipeline.errors import NetworkOrBackendFailure
from hr_pipeline.repositories.backend_client import BackendClient, parse_response
from hr_pipeline.schemas.conversion import (
    CallerProfile,
    ConversionRequest,
    ConversionResult,
    ManagerCandidate,
)


class UserRepository:
    """Repository for user-account remote operations."""

    GET_CURRENT_USER_PROFILE = "auth:getCurrentUserProfile"
    LIST_ADMINS = "users/admin/queries:listAdmins"
    CONVERT_APPLICATION_TO_USER = "hr/applications:convertApplicationToUser"

    def __init__(self, client: BackendClient):
        self.client = client

    async def get_current_user_profile(self) -> Optional[CallerProfile]:
        """Get the signed-in caller's profile, or None when not signed in."""
        value = await self.client.query(self.GET_CURRENT_USER_PROFILE, {})
        if value is None:
            return None
        return parse_response(CallerProfile.from_backend, value, self.GET_CURRENT_USER_PROFILE)

    async def list_admins(
        self,
        is_active: bool = True,
        num_items: int = 5,
        cursor: Optional[str] = None,
    ) -> List[ManagerCandidate]:
        """List one page of admin users (managers)."""
        value = await self.client.query(
            self.LIST_ADMINS,
            {
                "isActive": is_active,
                "paginationOpts": {"numItems": num_items, "cursor": cursor},
            },
        )
        if value is None:
            return []
        page = value.get("page") if isinstance(value, dict) else None
        if not isinstance(page, list):
            raise NetworkOrBackendFailure(
                "Manager list response has no page array",
                {"path": self.LIST_ADMINS},
            )
        return [parse_response(ManagerCandidate.model_validate, item, self.LIST_ADMINS) for item in page]

    async def convert_application_to_user(self, request: ConversionRequest) -> ConversionResult:
        """Create a user account from a selected application."""
        value = await self.client.mutation(
            self.CONVERT_APPLICATION_TO_USER,
            request.model_dump(by_alias=True, mode="json"),
        )
        if not isinstance(value, dict):
            raise NetworkOrBackendFailure(
                "Conversion response is not an object",
                {"application_id": request.application_id},
            )
        return parse_response(ConversionResult.model_validate, value, self.CONVERT_APPLICATION_TO_USER)
