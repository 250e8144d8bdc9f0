"""
FastAPI dependencies shared by the routers.
"""

from fastapi import Request

from hr_pipeline.services.pipeline_service import PipelineService


def get_pipeline_service(request: Request) -> PipelineService:
    """
    Get the board session of this application instance.

    The service is created once in the app lifespan and stored on app.state.
    
    Usage in a FastAPI endpoint:
        @router.get("/pipeline")
        async def get_pipeline(service: PipelineService = Depends(get_pipeline_service)):
            ...
    """
    return request.app.state.pipeline_service
