"""
Result notification dispatch.

The ranking engine does not deliver email or chat messages itself. After a
result commits it hands a ResultRecordedFact to every registered listener;
rendering and delivery belong to the listener. Dispatch is best-effort: a
failing or slow listener is logged and reported, never raised.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Union

from clubrank.data_models.results import ResultRecordedFact

logger = logging.getLogger(__name__)

ResultListener = Callable[[ResultRecordedFact], Union[None, Awaitable[None]]]


class ResultNotifier:
    """Fans a recorded result out to notification listeners."""

    def __init__(self, timeout_seconds: float = 5.0):
        self.timeout_seconds = timeout_seconds
        self._listeners: List[ResultListener] = []

    def subscribe(self, listener: ResultListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ResultListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def publish(self, fact: ResultRecordedFact) -> bool:
        """
        Deliver a fact to all listeners.

        Returns:
            True if every listener accepted the fact, False if any failed
        """
        delivered = True
        for listener in list(self._listeners):
            name = getattr(listener, '__name__', repr(listener))
            try:
                outcome = listener(fact)
                if inspect.isawaitable(outcome):
                    await asyncio.wait_for(outcome, timeout=self.timeout_seconds)
            except asyncio.TimeoutError:
                delivered = False
                logger.error(
                    f"Result listener {name} timed out after {self.timeout_seconds}s "
                    f"for match {fact.match_id}"
                )
            except Exception as e:
                delivered = False
                logger.error(f"Result listener {name} failed for match {fact.match_id}: {e}")
        return delivered
