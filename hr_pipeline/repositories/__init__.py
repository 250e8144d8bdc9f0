"""Remote backend repositories."""

from hr_pipeline.repositories.backend_client import BackendClient
from hr_pipeline.repositories.base import PipelineBackend, UserBackend
from hr_pipeline.repositories.pipeline_repository import PipelineRepository
from hr_pipeline.repositories.user_repository import UserRepository

__all__ = [
    "BackendClient",
    "PipelineBackend",
    "UserBackend",
    "PipelineRepository",
    "UserRepository",
]
