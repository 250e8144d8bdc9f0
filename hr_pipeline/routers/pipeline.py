"""
Pipeline router - API endpoints for the candidate pipeline board.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from hr_pipeline.core.dependencies import get_pipeline_service
from hr_pipeline.errors import raise_app_error
from hr_pipeline.schemas.base import BackendModel
from hr_pipeline.schemas.conversion import ConversionOutcome
from hr_pipeline.schemas.pipeline import (
    CandidateApplication,
    JobOption,
    Pipeline,
    Stage,
    StageLane,
)
from hr_pipeline.services.pipeline_service import PipelineService

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


class PipelineView(BackendModel):
    """Current board plus the loading flag."""
    selected_job_id: Optional[str] = None
    loading: bool = False
    pipeline: Optional[Pipeline] = None


class DropRequest(BackendModel):
    """A card dropped from one lane onto another."""
    source_stage: Stage
    source_index: int = Field(..., ge=0)
    destination_stage: Stage
    destination_index: int = Field(..., ge=0)


class DropResponse(BackendModel):
    application_id: str
    source_stage: Stage
    destination_stage: Stage
    state: str


class StatusUpdateRequest(BackendModel):
    """Request to move an application from the detail view."""
    new_stage: Stage
    rejection_reason: Optional[str] = None
    interview_notes: Optional[str] = None


class WardAssignRequest(BackendModel):
    ward_id: str = Field(..., min_length=1)


def _view(service: PipelineService) -> PipelineView:
    return PipelineView(
        selected_job_id=service.selected_job_id,
        loading=service.loading,
        pipeline=service.pipeline,
    )


@router.get("/jobs", response_model=List[JobOption])
async def list_jobs(service: PipelineService = Depends(get_pipeline_service)):
    """Get jobs available for the job selector."""
    return await service.get_available_jobs()


@router.post("/jobs/{job_id}/load", response_model=PipelineView)
async def load_job(job_id: str, service: PipelineService = Depends(get_pipeline_service)):
    """Select a job and load the first page of every stage."""
    await service.select_job(job_id)
    return _view(service)


@router.get("", response_model=PipelineView)
async def get_pipeline(service: PipelineService = Depends(get_pipeline_service)):
    """Get the current board."""
    return _view(service)


@router.post("/stages/{stage}/more", response_model=StageLane)
async def load_more(stage: Stage, service: PipelineService = Depends(get_pipeline_service)):
    """Load the next page of one stage."""
    await service.load_more(stage)
    return service.get_lane(stage)


@router.get("/stages/{stage}/search", response_model=List[CandidateApplication])
async def search_stage(
    stage: Stage,
    q: Optional[str] = Query(None, max_length=200),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Filter the loaded cards of a stage by name, email, or phone."""
    return service.search_lane(stage, q)


@router.post("/moves", response_model=DropResponse)
async def drop_card(request: DropRequest, service: PipelineService = Depends(get_pipeline_service)):
    """
    Move a dropped card optimistically.

    The card is moved locally first; if the backend rejects the move the
    local lanes are restored and the error is returned.
    """
    command = await service.drop_card(
        request.source_stage,
        request.source_index,
        request.destination_stage,
        request.destination_index,
    )
    return DropResponse(
        application_id=command.application.id,
        source_stage=command.source.stage,
        destination_stage=command.destination.stage,
        state=command.state.value,
    )


@router.post("/applications/{application_id}/stage", response_model=PipelineView)
async def update_application_stage(
    application_id: str,
    request: StatusUpdateRequest,
    service: PipelineService = Depends(get_pipeline_service),
):
    """Change the stage of an application from the detail view."""
    if request.new_stage == Stage.REJECTED:
        await service.reject_candidate(application_id, request.rejection_reason)
    else:
        await service.change_status(application_id, request.new_stage, request.interview_notes)
    return _view(service)


@router.post("/applications/{application_id}/ward", status_code=status.HTTP_204_NO_CONTENT)
async def assign_ward(
    application_id: str,
    request: WardAssignRequest,
    service: PipelineService = Depends(get_pipeline_service),
):
    """Assign an application of a blanket job posting to a ward."""
    await service.assign_to_ward(application_id, request.ward_id)


@router.post("/applications/{application_id}/convert", response_model=ConversionOutcome)
async def convert_application(
    application_id: str,
    service: PipelineService = Depends(get_pipeline_service),
):
    """Convert a selected application into a user account."""
    if service.pipeline is None:
        raise_app_error(409, "NO_PIPELINE", "Select a job before converting applications")
    return await service.convert_application(application_id)
