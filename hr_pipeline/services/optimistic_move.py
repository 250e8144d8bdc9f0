"""
Optimistic drag-and-drop moves.

A drop is applied to the local lanes at once, then submitted. If the
submission fails the exact splice is undone. If it succeeds the reload done by
the TransitionExecutor replaces the board, so nothing else is needed.

Known limitation: there is no per-card lock. Two overlapping drags on related
lanes can interleave before either resolves; the next successful reload is
what restores a consistent board.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from hr_pipeline.errors import NotFound
from hr_pipeline.schemas.pipeline import CandidateApplication, Stage, StageLane
from hr_pipeline.services.pipeline_store import PipelineStore
from hr_pipeline.services.transition_executor import (
    ReloadAfterMoveFailed,
    TransitionExecutor,
    coerce_stage,
)

logger = logging.getLogger(__name__)


class MoveState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    SUBMITTED_OPTIMISTICALLY = "submitted_optimistically"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


@dataclass
class MoveCommand:
    """One drop, with the splice it applied and how to undo it."""

    application: CandidateApplication
    source: StageLane
    source_index: int
    destination: StageLane
    destination_index: int
    state: MoveState = MoveState.DRAGGING
    inserted_index: Optional[int] = None
    error: Optional[Exception] = None
    history: List[MoveState] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return self.source is self.destination or self.source.stage == self.destination.stage

    def _transition(self, state: MoveState) -> None:
        self.history.append(self.state)
        self.state = state

    def apply(self) -> None:
        """Move the card from the source lane into the destination lane."""
        card = self.source.candidates.pop(self.source_index)
        index = max(0, min(self.destination_index, len(self.destination.candidates)))
        self.destination.candidates.insert(index, card)
        self.inserted_index = index
        self.source.total_count = max(0, self.source.total_count - 1)
        self.destination.total_count += 1
        self._transition(MoveState.SUBMITTED_OPTIMISTICALLY)

    def compensate(self) -> None:
        """Undo ``apply``: put the card back at its original index."""
        index = self.inserted_index
        lane = self.destination.candidates
        if index is None or index >= len(lane) or lane[index].id != self.application.id:
            # Another drag shifted the destination lane in the meantime
            index = self.destination.index_of(self.application.id)
        if index is not None and index >= 0:
            card = lane.pop(index)
            self.destination.total_count = max(0, self.destination.total_count - 1)
        else:
            card = self.application
        insert_at = min(self.source_index, len(self.source.candidates))
        self.source.candidates.insert(insert_at, card)
        self.source.total_count += 1
        self._transition(MoveState.ROLLED_BACK)

    def confirm(self) -> None:
        self._transition(MoveState.CONFIRMED)

    def skip(self) -> None:
        self._transition(MoveState.IDLE)


class OptimisticMoveHandler:
    """Apply drops locally, submit them, and roll back on failure."""

    def __init__(self, executor: TransitionExecutor, store: PipelineStore):
        self.executor = executor
        self.store = store
        self.last_command: Optional[MoveCommand] = None

    def _lane(self, stage: Stage) -> StageLane:
        lane = self.store.lane(stage)
        if lane is None:
            raise NotFound(f"Stage {stage.value} is not loaded", {"stage": stage.value})
        return lane

    def prepare(
        self,
        source_stage: "Stage | str",
        source_index: int,
        destination_stage: "Stage | str",
        destination_index: int,
    ) -> MoveCommand:
        """Build the command for a drop without touching any lane."""
        source = self._lane(coerce_stage(source_stage))
        destination = self._lane(coerce_stage(destination_stage))
        if not 0 <= source_index < len(source.candidates):
            raise NotFound(
                f"No card at index {source_index} in {source.stage.value}",
                {"stage": source.stage.value, "index": source_index},
            )
        return MoveCommand(
            application=source.candidates[source_index],
            source=source,
            source_index=source_index,
            destination=destination,
            destination_index=destination_index,
        )

    async def handle_drop(
        self,
        source_stage: "Stage | str",
        source_index: int,
        destination_stage: "Stage | str",
        destination_index: int,
        rejection_reason: Optional[str] = None,
        interview_notes: Optional[str] = None,
    ) -> MoveCommand:
        """
        Handle a card dropped on a lane.

        Dropping into the lane it came from does nothing and issues no request.
        On failure the splice is reversed and the error re-raised.
        """
        command = self.prepare(source_stage, source_index, destination_stage, destination_index)
        self.last_command = command

        if command.is_noop:
            command.skip()
            return command

        command.apply()
        card = command.application
        try:
            await self.executor.move_candidate(
                card.id,
                command.destination.stage,
                rejection_reason=rejection_reason,
                interview_notes=interview_notes,
            )
        except ReloadAfterMoveFailed as exc:
            # The backend accepted the move; the splice matches it
            command.error = exc
            command.confirm()
            raise
        except Exception as exc:
            command.error = exc
            command.compensate()
            logger.warning(
                "Rolled back move of %s from %s to %s: %s",
                card.id,
                command.source.stage.value,
                command.destination.stage.value,
                exc,
            )
            raise

        command.confirm()
        logger.info(
            "Moved %s to %s",
            card.candidate_name,
            command.destination.stage.value,
        )
        return command
