"""
Pipeline board business logic service.

One PipelineService backs one board session: it wires the store, the
transition executor, the optimistic move handler, the conversion workflow,
and the selection channel around a single backend.
"""

import logging
from typing import List, Optional, Tuple

from hr_pipeline.errors import NotFound, ValidationError
from hr_pipeline.repositories.base import PipelineBackend, UserBackend
from hr_pipeline.schemas.conversion import ConversionOutcome
from hr_pipeline.schemas.pipeline import (
    CandidateApplication,
    JobOption,
    Pipeline,
    Stage,
    StageLane,
)
from hr_pipeline.services.conversion_service import ConversionWorkflow
from hr_pipeline.services.optimistic_move import MoveCommand, OptimisticMoveHandler
from hr_pipeline.services.pipeline_store import PipelineStore
from hr_pipeline.services.selection_channel import SelectionChannel
from hr_pipeline.services.stage_pager import StagePager
from hr_pipeline.services.transition_executor import TransitionExecutor, coerce_stage

logger = logging.getLogger(__name__)


def filter_candidates(candidates: List[CandidateApplication], term: Optional[str]) -> List[CandidateApplication]:
    """Match name and email case-insensitively, phone as typed."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(candidates)
    return [
        candidate
        for candidate in candidates
        if needle in candidate.candidate_name.lower()
        or needle in candidate.email.lower()
        or (candidate.phone and needle in candidate.phone)
    ]


class PipelineService:
    """Service for the candidate pipeline board."""

    def __init__(
        self,
        pipeline_backend: PipelineBackend,
        user_backend: UserBackend,
        page_size: Optional[int] = None,
        discard_stale_loads: Optional[bool] = None,
        conversion: Optional[ConversionWorkflow] = None,
    ):
        self.pipeline_backend = pipeline_backend
        self.user_backend = user_backend
        self.store = PipelineStore(StagePager(pipeline_backend, page_size), discard_stale_loads)
        self.executor = TransitionExecutor(pipeline_backend, self.store)
        self.mover = OptimisticMoveHandler(self.executor, self.store)
        self.conversion = conversion or ConversionWorkflow(user_backend)
        self.selection = SelectionChannel()

    @property
    def pipeline(self) -> Optional[Pipeline]:
        return self.store.pipeline

    @property
    def loading(self) -> bool:
        return self.store.loading

    @property
    def selected_job_id(self) -> Optional[str]:
        return self.store.selected_job_id

    async def get_available_jobs(self) -> List[JobOption]:
        """Get jobs for the job selector, scoped to the caller's root."""
        profile = await self.user_backend.get_current_user_profile()
        root_id = profile.root_id if profile else None
        if not root_id:
            logger.error("No root id on current user profile; is the caller signed in?")
            return []
        jobs = await self.pipeline_backend.get_jobs_for_pipeline(root_id)
        logger.info("Found %d jobs for root %s", len(jobs), root_id)
        return jobs

    async def select_job(self, job_id: str) -> Optional[Pipeline]:
        return await self.store.load_pipeline(job_id)

    async def auto_select_first_job(self) -> Optional[JobOption]:
        """Load the job list and open the first job, if there is one."""
        jobs = await self.get_available_jobs()
        if not jobs:
            return None
        await self.select_job(jobs[0].value)
        return jobs[0]

    async def reload(self) -> Optional[Pipeline]:
        job_id = self.store.selected_job_id
        if not job_id:
            return None
        return await self.store.load_pipeline(job_id)

    async def load_more(self, stage: "Stage | str") -> Optional[StageLane]:
        job_id = self.store.selected_job_id
        if not job_id:
            return None
        return await self.store.load_more(job_id, coerce_stage(stage))

    def get_lane(self, stage: "Stage | str") -> StageLane:
        lane = self.store.lane(coerce_stage(stage))
        if lane is None:
            raise NotFound("No pipeline is loaded", {"stage": str(stage)})
        return lane

    def get_application(self, application_id: str) -> Tuple[CandidateApplication, Stage]:
        pipeline = self.store.pipeline
        located = pipeline.find(application_id) if pipeline else None
        if located is None:
            raise NotFound(
                f"Application {application_id} is not on the board",
                {"application_id": application_id},
            )
        stage, index = located
        return pipeline.lane(stage).candidates[index], stage

    def search_lane(self, stage: "Stage | str", term: Optional[str]) -> List[CandidateApplication]:
        return filter_candidates(self.get_lane(stage).candidates, term)

    async def drop_card(
        self,
        source_stage: "Stage | str",
        source_index: int,
        destination_stage: "Stage | str",
        destination_index: int,
    ) -> MoveCommand:
        return await self.mover.handle_drop(source_stage, source_index, destination_stage, destination_index)

    def select_card(self, candidate: CandidateApplication, stage: "Stage | str") -> int:
        return self.selection.publish(candidate, stage)

    async def change_status(
        self,
        application_id: str,
        stage: "Stage | str",
        interview_notes: Optional[str] = None,
    ) -> None:
        """Move an application from the detail view (no optimistic splice)."""
        await self.executor.move_candidate(application_id, coerce_stage(stage), interview_notes=interview_notes)

    async def reject_candidate(self, application_id: str, rejection_reason: Optional[str]) -> None:
        reason = (rejection_reason or "").strip()
        if not reason:
            raise ValidationError(
                "Please provide a rejection reason",
                {"application_id": application_id},
            )
        await self.executor.move_candidate(application_id, Stage.REJECTED, rejection_reason=reason)

    async def assign_to_ward(self, application_id: str, ward_id: str) -> None:
        """Assign an application to a ward, then reload the board."""
        await self.pipeline_backend.assign_application_to_ward(application_id, ward_id)
        await self.reload()

    async def convert_candidate(self, candidate: CandidateApplication, stage: "Stage | str") -> ConversionOutcome:
        """Convert a card into a user account; the board is left as is."""
        return await self.conversion.convert_candidate(candidate, stage)

    async def convert_application(self, application_id: str) -> ConversionOutcome:
        candidate, stage = self.get_application(application_id)
        return await self.convert_candidate(candidate, stage)
