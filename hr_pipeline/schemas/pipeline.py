"""
Pydantic schemas for the candidate pipeline board.

A Pipeline is the five StageLanes of one job posting. Lanes are filled page by
page and are mutated in place by optimistic moves until the next full reload
replaces the whole Pipeline.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import AliasChoices, Field

from hr_pipeline.schemas.base import BackendModel, PassthroughModel


class Stage(str, Enum):
    """Fixed, ordered hiring stages."""

    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    SELECTED = "selected"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return _STAGE_TITLES[self]

    @property
    def severity(self) -> str:
        """Display severity used by the board to colour the lane header."""
        return _STAGE_SEVERITIES[self]


STAGE_ORDER: Tuple[Stage, ...] = (
    Stage.APPLIED,
    Stage.SHORTLISTED,
    Stage.INTERVIEWED,
    Stage.SELECTED,
    Stage.REJECTED,
)

_STAGE_TITLES: Dict[Stage, str] = {
    Stage.APPLIED: "Applied",
    Stage.SHORTLISTED: "Shortlisted",
    Stage.INTERVIEWED: "Interviewed",
    Stage.SELECTED: "Selected",
    Stage.REJECTED: "Rejected",
}

_STAGE_SEVERITIES: Dict[Stage, str] = {
    Stage.APPLIED: "info",
    Stage.SHORTLISTED: "secondary",
    Stage.INTERVIEWED: "warn",
    Stage.SELECTED: "success",
    Stage.REJECTED: "danger",
}


class CandidateApplication(PassthroughModel):
    """
    One job application as shown on a pipeline card.

    Undeclared backend fields (jobLevel, position, jobPostingId, ...) are kept
    in ``model_extra`` so conversion can fall back on them.
    """

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    candidate_name: str
    email: str = ""
    phone: str = ""
    experience: float = 0
    applied_date: Optional[str] = None
    ward_id: Optional[str] = None
    interview_date: Optional[str] = None
    interview_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    job_title: Optional[str] = None
    resume_url: Optional[str] = None
    converted_to_user_id: Optional[str] = None
    converted_at: Optional[int] = None

    @property
    def is_converted(self) -> bool:
        return bool(self.converted_to_user_id)

    def extra_field(self, name: str) -> Any:
        return (self.model_extra or {}).get(name)


class StagePage(BackendModel):
    """One page of a lane as returned by the backend."""

    items: List[CandidateApplication] = Field(
        default_factory=list,
        validation_alias=AliasChoices("page", "items"),
    )
    next_cursor: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("continueCursor", "nextCursor", "next_cursor"),
    )
    is_done: bool = True
    total_count: int = 0


class StageLane(BackendModel):
    """Materialized view of one (job, stage) column."""

    stage: Stage
    title: str
    candidates: List[CandidateApplication] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    is_done: bool = False
    total_count: int = 0

    @classmethod
    def from_page(cls, stage: Stage, page: StagePage) -> "StageLane":
        return cls(
            stage=stage,
            title=stage.label,
            candidates=list(page.items),
            next_cursor=page.next_cursor,
            is_done=page.is_done,
            total_count=page.total_count,
        )

    def append_page(self, page: StagePage) -> None:
        """Append a continuation page, keeping page order."""
        self.candidates.extend(page.items)
        self.next_cursor = page.next_cursor
        self.is_done = page.is_done
        self.total_count = page.total_count

    @property
    def has_more(self) -> bool:
        return not self.is_done and bool(self.next_cursor)

    def index_of(self, application_id: str) -> int:
        for index, candidate in enumerate(self.candidates):
            if candidate.id == application_id:
                return index
        return -1


class Pipeline(BackendModel):
    """The five lanes of the selected job, in stage order."""

    job_id: str
    lanes: List[StageLane]

    def lane(self, stage: Stage) -> Optional[StageLane]:
        for lane in self.lanes:
            if lane.stage == stage:
                return lane
        return None

    def find(self, application_id: str) -> Optional[Tuple[Stage, int]]:
        """Locate an application as (stage, index), or None if not materialized."""
        for lane in self.lanes:
            index = lane.index_of(application_id)
            if index >= 0:
                return lane.stage, index
        return None

    def application_ids(self) -> Iterator[str]:
        for lane in self.lanes:
            for candidate in lane.candidates:
                yield candidate.id

    def duplicate_application_ids(self) -> List[str]:
        """Application ids that appear in more than one place on the board."""
        seen: set[str] = set()
        duplicates: List[str] = []
        for application_id in self.application_ids():
            if application_id in seen and application_id not in duplicates:
                duplicates.append(application_id)
            seen.add(application_id)
        return duplicates

    def misplaced_conversions(self) -> List[str]:
        """Converted applications found outside the selected lane."""
        return [
            candidate.id
            for lane in self.lanes
            if lane.stage != Stage.SELECTED
            for candidate in lane.candidates
            if candidate.is_converted
        ]


class JobOption(BackendModel):
    """Entry of the job selector."""

    value: str
    label: str
    total_applications: int = 0
