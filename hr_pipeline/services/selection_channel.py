"""Card-selection broadcast used to open the candidate detail view."""

import logging
from dataclasses import dataclass
from typing import Callable, List

from hr_pipeline.schemas.pipeline import CandidateApplication, Stage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardSelection:
    candidate: CandidateApplication
    stage: Stage


SelectionCallback = Callable[[CardSelection], None]


class Subscription:
    """Handle returned by ``SelectionChannel.subscribe``."""

    def __init__(self, channel: "SelectionChannel", callback: SelectionCallback):
        self._channel = channel
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._channel._remove(self._callback)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class SelectionChannel:
    """
    Single-topic publish/subscribe.

    Every current subscriber receives each selection synchronously, in
    publish order. Subscriber errors propagate to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: List[SelectionCallback] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: SelectionCallback) -> Subscription:
        self._subscribers.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: SelectionCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, candidate: CandidateApplication, stage: "Stage | str") -> int:
        """Deliver a selection; returns how many subscribers received it."""
        selection = CardSelection(candidate=candidate, stage=Stage(stage))
        logger.debug("Card selected: %s in %s", candidate.candidate_name, selection.stage.value)
        # Copy so a subscriber may unsubscribe while being notified
        subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(selection)
        return len(subscribers)
