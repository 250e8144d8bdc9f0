"""
Pipeline store - the live board of the selected job.

One store is created per board session. It owns the current Pipeline and is
the only place that replaces it.

Consistency rules:
- ``load_pipeline`` fetches the first page of every lane in parallel and swaps
  the whole Pipeline in a single assignment; readers see either the old board
  or the new one, never a mix.
- Loads may resolve out of order. With ``discard_stale_loads`` on, a load that
  resolves after a newer load has already been applied is dropped. With it
  off, the last load to resolve wins.
- ``load_more`` appends to the lane it read. If the Pipeline was replaced while
  the page was in flight, the page is dropped.
"""

import asyncio
import logging
from typing import Optional

from hr_pipeline.core.config import settings
from hr_pipeline.schemas.pipeline import Pipeline, Stage, StageLane, STAGE_ORDER
from hr_pipeline.services.stage_pager import StagePager

logger = logging.getLogger(__name__)


class PipelineStore:
    """Holds the per-stage lanes of one job and the loading flag."""

    def __init__(self, pager: StagePager, discard_stale_loads: Optional[bool] = None):
        self.pager = pager
        self.discard_stale_loads = (
            settings.PIPELINE_DISCARD_STALE_LOADS if discard_stale_loads is None else discard_stale_loads
        )
        self._pipeline: Optional[Pipeline] = None
        self._selected_job_id: Optional[str] = None
        self._loads_in_flight = 0
        self._issued_seq = 0
        self._applied_seq = 0

    @property
    def pipeline(self) -> Optional[Pipeline]:
        return self._pipeline

    @property
    def loading(self) -> bool:
        return self._loads_in_flight > 0

    @property
    def selected_job_id(self) -> Optional[str]:
        return self._selected_job_id

    def lane(self, stage: Stage) -> Optional[StageLane]:
        if self._pipeline is None:
            return None
        return self._pipeline.lane(Stage(stage))

    async def load_pipeline(self, job_id: str) -> Optional[Pipeline]:
        """
        Load page 1 of all five stages for a job and make it the live Pipeline.

        Returns the Pipeline that is live once this call resolves. On failure
        the previous Pipeline stays live and the error is re-raised.
        """
        self._issued_seq += 1
        seq = self._issued_seq
        self._selected_job_id = job_id
        self._loads_in_flight += 1
        logger.info("Loading pipeline for job %s (load #%d)", job_id, seq)

        try:
            pages = await asyncio.gather(
                *(self.pager.fetch_page(job_id, stage, None) for stage in STAGE_ORDER)
            )
        except Exception:
            logger.exception("Pipeline load #%d failed for job %s", seq, job_id)
            raise
        finally:
            self._loads_in_flight -= 1

        if self.discard_stale_loads and seq < self._applied_seq:
            logger.debug("Discarding stale load #%d (load #%d already applied)", seq, self._applied_seq)
            return self._pipeline

        pipeline = Pipeline(
            job_id=job_id,
            lanes=[StageLane.from_page(stage, page) for stage, page in zip(STAGE_ORDER, pages)],
        )
        misplaced = pipeline.misplaced_conversions()
        if misplaced:
            logger.warning(
                "Converted applications outside the selected lane for job %s: %s",
                job_id,
                ", ".join(misplaced),
            )
        self._pipeline = pipeline
        self._applied_seq = seq
        logger.info(
            "Pipeline loaded for job %s: %s",
            job_id,
            ", ".join(f"{lane.stage.value}={len(lane.candidates)}/{lane.total_count}" for lane in pipeline.lanes),
        )
        return pipeline

    async def load_more(self, job_id: str, stage: Stage) -> Optional[StageLane]:
        """
        Fetch the next page of one lane and append it.

        No-op when the lane is complete, has no cursor, or belongs to another job.
        """
        pipeline = self._pipeline
        if pipeline is None or pipeline.job_id != job_id:
            logger.debug("load_more ignored: job %s is not loaded", job_id)
            return None

        lane = pipeline.lane(Stage(stage))
        if lane is None or not lane.has_more:
            return lane

        cursor = lane.next_cursor
        try:
            page = await self.pager.fetch_page(job_id, lane.stage, cursor)
        except Exception:
            logger.exception("load_more failed for job %s stage %s", job_id, lane.stage.value)
            raise

        if self._pipeline is not pipeline:
            logger.debug("Dropping %s page for job %s: pipeline was reloaded", lane.stage.value, job_id)
            return self.lane(lane.stage)
        if lane.next_cursor != cursor:
            # A concurrent load_more already appended this page
            logger.debug("Dropping duplicate %s page for job %s", lane.stage.value, job_id)
            return lane

        lane.append_page(page)
        return lane
