"""Health check router."""

from fastapi import APIRouter, Depends

from hr_pipeline.core.dependencies import get_pipeline_service
from hr_pipeline.services.pipeline_service import PipelineService

router = APIRouter()


@router.get("/health")
async def health_check(service: PipelineService = Depends(get_pipeline_service)):
    """Lightweight health endpoint with board session state."""
    return {
        "api_ok": True,
        "selected_job_id": service.selected_job_id,
        "loading": service.loading,
    }
