"""
Stage transitions for single applications.
"""

import logging
from typing import Optional

from hr_pipeline.errors import NetworkOrBackendFailure, PipelineError, ValidationError
from hr_pipeline.repositories.base import PipelineBackend
from hr_pipeline.schemas.pipeline import Stage
from hr_pipeline.services.pipeline_store import PipelineStore

logger = logging.getLogger(__name__)


class ReloadAfterMoveFailed(NetworkOrBackendFailure):
    """The move was accepted by the backend but the board could not be reloaded."""

    code = "RELOAD_AFTER_MOVE_FAILED"


def coerce_stage(value: "Stage | str") -> Stage:
    try:
        return Stage(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown stage: {value}", {"stage": str(value)}) from exc


class TransitionExecutor:
    """
    Submit a stage change and reload the board.

    The legal-transition matrix lives on the backend; nothing is checked here
    beyond the stage being one of the five. After a successful move every lane
    is re-fetched from page 1.
    """

    def __init__(self, backend: PipelineBackend, store: PipelineStore):
        self.backend = backend
        self.store = store

    async def move_candidate(
        self,
        application_id: str,
        new_stage: "Stage | str",
        rejection_reason: Optional[str] = None,
        interview_notes: Optional[str] = None,
    ) -> None:
        stage = coerce_stage(new_stage)
        logger.info("Moving application %s to %s", application_id, stage.value)

        try:
            await self.backend.move_application_stage(
                application_id,
                stage,
                rejection_reason=rejection_reason,
                interview_notes=interview_notes,
            )
        except PipelineError as exc:
            logger.warning("Move of application %s to %s failed: %s", application_id, stage.value, exc)
            raise

        job_id = self.store.selected_job_id
        if not job_id:
            return

        try:
            await self.store.load_pipeline(job_id)
        except Exception as exc:
            raise ReloadAfterMoveFailed(
                f"Moved application to {stage.value} but reloading the pipeline failed",
                {"application_id": application_id, "stage": stage.value, "job_id": job_id},
            ) from exc
