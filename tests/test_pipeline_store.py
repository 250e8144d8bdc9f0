import asyncio
import logging

import pytest

from hr_pipeline.errors import NetworkOrBackendFailure
from hr_pipeline.schemas.pipeline import Stage, STAGE_ORDER
from hr_pipeline.services.pipeline_store import PipelineStore
from hr_pipeline.services.stage_pager import StagePager
from tests.conftest import JOB_ID, lane_ids


pytestmark = pytest.mark.unit


def make_store(backend, page_size=30, discard_stale_loads=True):
    return PipelineStore(StagePager(backend, page_size), discard_stale_loads)


@pytest.mark.asyncio
async def test_first_page_scenario_then_load_more(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 45)
    backend.seed(JOB_ID, Stage.SHORTLISTED, 10)
    store = make_store(backend)

    await store.load_pipeline(JOB_ID)

    applied = store.lane(Stage.APPLIED)
    assert len(applied.candidates) == 30
    assert applied.is_done is False
    assert applied.next_cursor is not None
    assert applied.total_count == 45

    shortlisted = store.lane(Stage.SHORTLISTED)
    assert len(shortlisted.candidates) == 10
    assert shortlisted.is_done is True
    assert shortlisted.next_cursor is None

    await store.load_more(JOB_ID, Stage.APPLIED)

    applied = store.lane(Stage.APPLIED)
    assert len(applied.candidates) == 45
    assert applied.is_done is True
    assert applied.next_cursor is None
    assert applied.candidates[30].id == f"{JOB_ID}-applied-30"


@pytest.mark.asyncio
async def test_load_pipeline_builds_five_lanes_in_order(backend):
    backend.seed(JOB_ID, Stage.SELECTED, 2)
    store = make_store(backend)

    pipeline = await store.load_pipeline(JOB_ID)

    assert [lane.stage for lane in pipeline.lanes] == list(STAGE_ORDER)
    assert [lane.title for lane in pipeline.lanes] == ["Applied", "Shortlisted", "Interviewed", "Selected", "Rejected"]
    assert store.selected_job_id == JOB_ID
    assert store.loading is False
    assert backend.count("get_stage_page") == 5
    assert all(call[3] is None for call in backend.calls)


@pytest.mark.asyncio
async def test_load_pipeline_fetches_stages_in_parallel(backend):
    gate = asyncio.Event()
    backend.gates[f"page:{JOB_ID}"] = gate
    store = make_store(backend)

    task = asyncio.create_task(store.load_pipeline(JOB_ID))
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    # All five requests are in flight before any of them resolves
    assert backend.count("get_stage_page") == 5
    assert store.loading is True
    assert store.pipeline is None

    gate.set()
    await task
    assert store.loading is False
    assert store.pipeline is not None


@pytest.mark.asyncio
async def test_load_more_on_completed_lane_makes_no_request(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 5)
    store = make_store(backend)
    await store.load_pipeline(JOB_ID)
    requests_before = backend.count("get_stage_page")

    for _ in range(3):
        lane = await store.load_more(JOB_ID, Stage.APPLIED)
        assert len(lane.candidates) == 5

    assert backend.count("get_stage_page") == requests_before


@pytest.mark.asyncio
async def test_lane_length_never_decreases_across_load_more(backend):
    backend.seed(JOB_ID, Stage.INTERVIEWED, 70)
    store = make_store(backend, page_size=20)
    await store.load_pipeline(JOB_ID)

    lengths = [len(store.lane(Stage.INTERVIEWED).candidates)]
    for _ in range(5):
        await store.load_more(JOB_ID, Stage.INTERVIEWED)
        lengths.append(len(store.lane(Stage.INTERVIEWED).candidates))

    assert lengths == sorted(lengths)
    assert lengths[-1] == 70
    assert store.lane(Stage.INTERVIEWED).is_done


@pytest.mark.asyncio
async def test_lanes_are_exclusive_after_full_load(backend):
    for stage in STAGE_ORDER:
        backend.seed(JOB_ID, stage, 12)
    store = make_store(backend, page_size=5)
    await store.load_pipeline(JOB_ID)
    for stage in STAGE_ORDER:
        while store.lane(stage).has_more:
            await store.load_more(JOB_ID, stage)

    ids = list(store.pipeline.application_ids())
    assert len(ids) == 60
    assert store.pipeline.duplicate_application_ids() == []


@pytest.mark.asyncio
async def test_load_more_for_other_job_is_ignored(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 40)
    store = make_store(backend)
    await store.load_pipeline(JOB_ID)
    requests_before = backend.count("get_stage_page")

    assert await store.load_more("job_other", Stage.APPLIED) is None
    assert backend.count("get_stage_page") == requests_before


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_pipeline(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 3)
    store = make_store(backend)
    first = await store.load_pipeline(JOB_ID)

    backend.page_error = NetworkOrBackendFailure("backend down")
    with pytest.raises(NetworkOrBackendFailure):
        await store.load_pipeline(JOB_ID)

    assert store.pipeline is first
    assert store.loading is False


@pytest.mark.asyncio
async def test_stale_load_is_discarded(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 3)
    backend.seed("job_2", Stage.APPLIED, 1)
    store = make_store(backend, discard_stale_loads=True)

    slow_gate = asyncio.Event()
    backend.gates[f"page:{JOB_ID}"] = slow_gate
    slow = asyncio.create_task(store.load_pipeline(JOB_ID))
    await asyncio.sleep(0)

    await store.load_pipeline("job_2")
    assert store.pipeline.job_id == "job_2"

    slow_gate.set()
    await slow

    assert store.pipeline.job_id == "job_2"
    assert lane_ids(store, Stage.APPLIED) == ["job_2-applied-0"]


@pytest.mark.asyncio
async def test_last_resolved_load_wins_when_guard_disabled(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 3)
    backend.seed("job_2", Stage.APPLIED, 1)
    store = make_store(backend, discard_stale_loads=False)

    slow_gate = asyncio.Event()
    backend.gates[f"page:{JOB_ID}"] = slow_gate
    slow = asyncio.create_task(store.load_pipeline(JOB_ID))
    await asyncio.sleep(0)

    await store.load_pipeline("job_2")
    slow_gate.set()
    await slow

    assert store.pipeline.job_id == JOB_ID


@pytest.mark.asyncio
async def test_load_more_page_dropped_when_pipeline_reloaded(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 45)
    store = make_store(backend)
    await store.load_pipeline(JOB_ID)

    gate = asyncio.Event()
    backend.gates[f"page:{JOB_ID}:30"] = gate
    pending = asyncio.create_task(store.load_more(JOB_ID, Stage.APPLIED))
    await asyncio.sleep(0)
    assert ("get_stage_page", JOB_ID, Stage.APPLIED, "30") in backend.calls

    reloaded = await store.load_pipeline(JOB_ID)
    gate.set()
    lane = await pending

    assert store.pipeline is reloaded
    assert lane is reloaded.lane(Stage.APPLIED)
    assert len(lane.candidates) == 30
    assert lane.has_more
    assert store.pipeline.duplicate_application_ids() == []


@pytest.mark.asyncio
async def test_failed_newer_load_does_not_block_older_one(backend):
    backend.seed(JOB_ID, Stage.APPLIED, 3)
    store = make_store(backend)

    gate = asyncio.Event()
    backend.gates[f"page:{JOB_ID}"] = gate
    older = asyncio.create_task(store.load_pipeline(JOB_ID))
    await asyncio.sleep(0)

    backend.page_error = NetworkOrBackendFailure("backend down")
    with pytest.raises(NetworkOrBackendFailure):
        await store.load_pipeline("job_2")
    backend.page_error = None

    gate.set()
    pipeline = await older

    assert store.pipeline is pipeline
    assert pipeline.job_id == JOB_ID
    assert lane_ids(store, Stage.APPLIED) == [f"{JOB_ID}-applied-0", f"{JOB_ID}-applied-1", f"{JOB_ID}-applied-2"]


def test_stage_display_metadata():
    assert [stage.severity for stage in STAGE_ORDER] == ["info", "secondary", "warn", "success", "danger"]
    assert Stage.INTERVIEWED.label == "Interviewed"


@pytest.mark.asyncio
async def test_converted_application_outside_selected_is_reported(backend, caplog):
    backend.seed(JOB_ID, Stage.SELECTED, 2, prefix="X", convertedToUserId="exec_1", convertedAt=1700000000000)
    backend.seed(JOB_ID, Stage.REJECTED, 1, prefix="R", convertedToUserId="exec_2")
    store = make_store(backend)

    with caplog.at_level(logging.WARNING, logger="hr_pipeline.services.pipeline_store"):
        pipeline = await store.load_pipeline(JOB_ID)

    assert pipeline.lane(Stage.SELECTED).candidates[0].is_converted
    assert pipeline.misplaced_conversions() == ["R-0"]
    assert "outside the selected lane" in caplog.text
    assert "R-0" in caplog.text


@pytest.mark.asyncio
async def test_conversions_in_selected_lane_log_nothing(backend, caplog):
    backend.seed(JOB_ID, Stage.SELECTED, 1, prefix="X", convertedToUserId="exec_1")
    store = make_store(backend)

    with caplog.at_level(logging.WARNING, logger="hr_pipeline.services.pipeline_store"):
        await store.load_pipeline(JOB_ID)

    assert "outside the selected lane" not in caplog.text
