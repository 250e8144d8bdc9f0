"""
Pipeline repository - remote operations on job applications.
"""

from typing import List, Optional

from hr_pipeline.errors import NetworkOrBackendFailure
from hr_pipeline.repositories.backend_client import BackendClient, parse_response
from hr_pipeline.schemas.pipeline import JobOption, Stage, StagePage


class PipelineRepository:
    """Repository for pipeline queries and mutations."""

    GET_STAGE_PAGE = "hr/pipeline:getStagePage"
    MOVE_APPLICATION_STAGE = "hr/pipeline:moveApplicationStage"
    GET_JOBS_FOR_PIPELINE = "hr/pipeline:getJobsForPipeline"
    ASSIGN_APPLICATION_TO_WARD = "hr/pipeline:assignApplicationToWard"

    def __init__(self, client: BackendClient):
        self.client = client

    async def get_stage_page(
        self,
        job_posting_id: str,
        status: Stage,
        num_items: int,
        cursor: Optional[str] = None,
    ) -> StagePage:
        """Fetch one page of applications for a (job, stage) pair."""
        value = await self.client.query(
            self.GET_STAGE_PAGE,
            {
                "jobPostingId": job_posting_id,
                "status": Stage(status).value,
                # cursor must be sent as an explicit null for the first page
                "paginationOpts": {"numItems": num_items, "cursor": cursor},
            },
        )
        if not isinstance(value, dict):
            raise NetworkOrBackendFailure(
                "Stage page response is not an object",
                {"job_posting_id": job_posting_id, "status": Stage(status).value},
            )
        return parse_response(StagePage.model_validate, value, self.GET_STAGE_PAGE)

    async def move_application_stage(
        self,
        application_id: str,
        new_status: Stage,
        rejection_reason: Optional[str] = None,
        interview_notes: Optional[str] = None,
    ) -> None:
        """Ask the backend to move an application; it enforces the legal transitions."""
        await self.client.mutation(
            self.MOVE_APPLICATION_STAGE,
            {
                "applicationId": application_id,
                "newStatus": Stage(new_status).value,
                "rejectionReason": rejection_reason,
                "interviewNotes": interview_notes,
            },
        )

    async def get_jobs_for_pipeline(self, root_id: str) -> List[JobOption]:
        """Get job postings that can be shown on the board."""
        value = await self.client.query(self.GET_JOBS_FOR_PIPELINE, {"rootId": root_id})
        if value is None:
            return []
        if not isinstance(value, list):
            raise NetworkOrBackendFailure(
                "Job list response is not an array",
                {"path": self.GET_JOBS_FOR_PIPELINE, "root_id": root_id},
            )
        return [parse_response(JobOption.model_validate, item, self.GET_JOBS_FOR_PIPELINE) for item in value]

    async def assign_application_to_ward(self, application_id: str, ward_id: str) -> None:
        """Assign an application of a blanket job posting to a ward."""
        await self.client.mutation(
            self.ASSIGN_APPLICATION_TO_WARD,
            {"applicationId": application_id, "wardId": ward_id},
        )
