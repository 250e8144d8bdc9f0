"""
Schemas package.

Import all schemas here for easy access.
"""

from hr_pipeline.schemas.pipeline import (
    CandidateApplication,
    JobOption,
    Pipeline,
    Stage,
    StageLane,
    StagePage,
    STAGE_ORDER,
)
from hr_pipeline.schemas.conversion import (
    CallerProfile,
    ConversionOutcome,
    ConversionRequest,
    ConversionResult,
    ManagerCandidate,
    RoleClassification,
    UserType,
)

__all__ = [
    "CandidateApplication",
    "JobOption",
    "Pipeline",
    "Stage",
    "StageLane",
    "StagePage",
    "STAGE_ORDER",
    "CallerProfile",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResult",
    "ManagerCandidate",
    "RoleClassification",
    "UserType",
]
