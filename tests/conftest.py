"""
Pytest configuration and shared fixtures.

FakeBackend stands in for the remote function backend: it keeps applications
per job in memory, pages them with offset cursors, and can be told to fail or
to hold a call until released.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from hr_pipeline.errors import ValidationError
from hr_pipeline.schemas.conversion import (
    CallerProfile,
    ConversionRequest,
    ConversionResult,
    ManagerCandidate,
)
from hr_pipeline.schemas.pipeline import (
    CandidateApplication,
    JobOption,
    Stage,
    StagePage,
)
from hr_pipeline.services.pipeline_service import PipelineService


JOB_ID = "job_1"
ROOT_ID = "root_1"


def make_application(application_id: str, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "_id": application_id,
        "candidateName": f"Candidate {application_id}",
        "email": f"{application_id}@example.com",
        "phone": "9800000000",
        "experience": 2,
        "appliedDate": "2026-01-05",
    }
    payload.update(overrides)
    return payload


class FakeBackend:
    """In-memory implementation of PipelineBackend and UserBackend."""

    def __init__(self) -> None:
        self.applications: Dict[str, Dict[Stage, List[Dict[str, Any]]]] = {}
        self.jobs: List[JobOption] = [
            JobOption(value=JOB_ID, label="Field Executive", total_applications=0),
        ]
        self.profile: Optional[Dict[str, Any]] = {
            "userId": "admin_1",
            "name": "Asha",
            "roleLevel": 6,
            "rootId": ROOT_ID,
        }
        self.managers: List[Dict[str, Any]] = [
            {"_id": "mgr_ward", "name": "Ward Lead", "roleLevel": 3},
            {"_id": "mgr_district", "name": "District Lead", "roleLevel": 6},
        ]
        self.calls: List[tuple] = []
        self.move_error: Optional[Exception] = None
        self.page_error: Optional[Exception] = None
        self.conversions: List[ConversionRequest] = []
        self.ward_assignments: Dict[str, str] = {}
        self.gates: Dict[str, asyncio.Event] = {}

    def seed(self, job_id: str, stage: Stage, count: int, prefix: Optional[str] = None, **fields: Any) -> List[str]:
        lanes = self.applications.setdefault(job_id, {s: [] for s in Stage})
        prefix = prefix or f"{job_id}-{stage.value}"
        ids = []
        for index in range(count):
            application_id = f"{prefix}-{index}"
            lanes[stage].append(make_application(application_id, **fields))
            ids.append(application_id)
        return ids

    def stage_of(self, application_id: str) -> Optional[Stage]:
        for lanes in self.applications.values():
            for stage, items in lanes.items():
                if any(item["_id"] == application_id for item in items):
                    return stage
        return None

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def _wait_gate(self, key: str) -> None:
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()

    # PipelineBackend

    async def get_stage_page(self, job_posting_id, status, num_items, cursor=None) -> StagePage:
        self.calls.append(("get_stage_page", job_posting_id, Stage(status), cursor))
        await self._wait_gate(f"page:{job_posting_id}")
        await self._wait_gate(f"page:{job_posting_id}:{cursor}")
        if self.page_error is not None:
            raise self.page_error
        items = self.applications.get(job_posting_id, {}).get(Stage(status), [])
        start = int(cursor) if cursor else 0
        end = start + num_items
        is_done = end >= len(items)
        return StagePage.model_validate(
            {
                "page": [dict(item) for item in items[start:end]],
                "continueCursor": str(end),
                "isDone": is_done,
                "totalCount": len(items),
            }
        )

    async def move_application_stage(self, application_id, new_status, rejection_reason=None, interview_notes=None) -> None:
        self.calls.append(("move_application_stage", application_id, Stage(new_status), rejection_reason, interview_notes))
        await self._wait_gate(f"move:{application_id}")
        if self.move_error is not None:
            raise self.move_error
        for lanes in self.applications.values():
            for stage, items in lanes.items():
                for item in items:
                    if item["_id"] == application_id:
                        items.remove(item)
                        if rejection_reason:
                            item["rejectionReason"] = rejection_reason
                        lanes[Stage(new_status)].append(item)
                        return
        raise ValidationError("Application not found")

    async def get_jobs_for_pipeline(self, root_id) -> List[JobOption]:
        self.calls.append(("get_jobs_for_pipeline", root_id))
        return list(self.jobs)

    async def assign_application_to_ward(self, application_id, ward_id) -> None:
        self.calls.append(("assign_application_to_ward", application_id, ward_id))
        self.ward_assignments[application_id] = ward_id

    # UserBackend

    async def get_current_user_profile(self) -> Optional[CallerProfile]:
        self.calls.append(("get_current_user_profile",))
        if self.profile is None:
            return None
        return CallerProfile.from_backend(self.profile)

    async def list_admins(self, is_active=True, num_items=5, cursor=None) -> List[ManagerCandidate]:
        self.calls.append(("list_admins", is_active, num_items))
        return [ManagerCandidate.model_validate(m) for m in self.managers[:num_items]]

    async def convert_application_to_user(self, request: ConversionRequest) -> ConversionResult:
        self.calls.append(("convert_application_to_user", request.application_id))
        self.conversions.append(request)
        return ConversionResult.model_validate(
            {
                "success": True,
                "setupLink": f"https://example.com/setup/{request.application_id}",
                "userType": request.user_type.value,
                "assignedWardIds": ["ward_7"] if request.user_type.value == "executive" else None,
            }
        )


def lane_ids(service_or_store, stage: Stage) -> List[str]:
    return [candidate.id for candidate in service_or_store.pipeline.lane(stage).candidates]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def service(backend: FakeBackend) -> PipelineService:
    return PipelineService(backend, backend, page_size=30, discard_stale_loads=True)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
