"""
Cursor pagination of one pipeline lane.
"""

import logging
from typing import Optional

from hr_pipeline.core.config import settings
from hr_pipeline.repositories.base import PipelineBackend
from hr_pipeline.schemas.pipeline import Stage, StagePage

logger = logging.getLogger(__name__)


class StagePager:
    """Fetch pages of applications for a (job, stage) pair."""

    def __init__(self, backend: PipelineBackend, page_size: Optional[int] = None):
        self.backend = backend
        self.page_size = page_size or settings.PIPELINE_PAGE_SIZE

    async def fetch_page(self, job_id: str, stage: Stage, cursor: Optional[str] = None) -> StagePage:
        """
        Fetch the page that starts at ``cursor``.

        A None cursor restarts from the first page. Errors from the backend
        propagate unchanged; there is no retry.
        """
        page = await self.backend.get_stage_page(job_id, Stage(stage), self.page_size, cursor)
        if page.is_done:
            # Some backends still hand out a cursor after the last page
            page.next_cursor = None
        logger.debug(
            "Fetched %d %s applications for job %s (done=%s, total=%d)",
            len(page.items),
            Stage(stage).value,
            job_id,
            page.is_done,
            page.total_count,
        )
        return page
