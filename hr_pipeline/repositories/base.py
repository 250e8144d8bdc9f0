"""
Interfaces of the remote operations the pipeline engine consumes.
"""

from typing import List, Optional, Protocol

from hr_pipeline.schemas.conversion import (
    CallerProfile,
    ConversionRequest,
    ConversionResult,
    ManagerCandidate,
)
from hr_pipeline.schemas.pipeline import JobOption, Stage, StagePage


class PipelineBackend(Protocol):
    """Reads and writes applications of a job's pipeline."""

    async def get_stage_page(
        self,
        job_posting_id: str,
        status: Stage,
        num_items: int,
        cursor: Optional[str] = None,
    ) -> StagePage:
        ...

    async def move_application_stage(
        self,
        application_id: str,
        new_status: Stage,
        rejection_reason: Optional[str] = None,
        interview_notes: Optional[str] = None,
    ) -> None:
        ...

    async def get_jobs_for_pipeline(self, root_id: str) -> List[JobOption]:
        ...

    async def assign_application_to_ward(self, application_id: str, ward_id: str) -> None:
        ...


class UserBackend(Protocol):
    """Caller profile, manager directory, and account creation."""

    async def get_current_user_profile(self) -> Optional[CallerProfile]:
        ...

    async def list_admins(
        self,
        is_active: bool = True,
        num_items: int = 5,
        cursor: Optional[str] = None,
    ) -> List[ManagerCandidate]:
        ...

    async def convert_application_to_user(self, request: ConversionRequest) -> ConversionResult:
        ...
