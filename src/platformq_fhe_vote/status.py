"""
Transaction status stream.

A single shared status slot fed by sequence-numbered events. A displayed
status is valid only while its sequence number is the latest one; terminal
events schedule a cancellable clear task bound to their sequence number.
"""

import asyncio
import logging
from typing import Optional, Callable, Any, List

from .models import StatusEvent
from .types import TransactionPhase

logger = logging.getLogger(__name__)

StatusListener = Callable[[Optional[StatusEvent]], Any]


class StatusChannel:
    """Single-slot transaction status with self-clearing terminal phases"""

    def __init__(self, success_clear_delay: float = 2.0, error_clear_delay: float = 3.0):
        self.success_clear_delay = success_clear_delay
        self.error_clear_delay = error_clear_delay

        self._sequence = 0
        self._current: Optional[StatusEvent] = None
        self._clear_task: Optional[asyncio.Task] = None
        self._listeners: List[StatusListener] = []

    @property
    def current(self) -> Optional[StatusEvent]:
        return self._current

    @property
    def sequence(self) -> int:
        return self._sequence

    def is_current(self, event: StatusEvent) -> bool:
        return self._current is not None and self._current.sequence == event.sequence

    def publish(self, phase: TransactionPhase, message: str) -> StatusEvent:
        """Supersede the current status with a new event"""
        self._sequence += 1
        event = StatusEvent(sequence=self._sequence, phase=phase, message=message)
        self._current = event
        self._cancel_clear_task()

        if phase is TransactionPhase.SUCCESS:
            self._clear_task = self._schedule_clear(event.sequence, self.success_clear_delay)
        elif phase is TransactionPhase.ERROR:
            self._clear_task = self._schedule_clear(event.sequence, self.error_clear_delay)

        logger.debug(f"Status #{event.sequence} {phase.value}: {message}")
        self._notify(event)
        return event

    def pending(self, message: str) -> StatusEvent:
        return self.publish(TransactionPhase.PENDING, message)

    def success(self, message: str) -> StatusEvent:
        return self.publish(TransactionPhase.SUCCESS, message)

    def error(self, message: str) -> StatusEvent:
        return self.publish(TransactionPhase.ERROR, message)

    def clear(self, sequence: Optional[int] = None) -> bool:
        """Hide the current status; with a sequence, only if it is still the latest"""
        if self._current is None:
            return False
        if sequence is not None and sequence != self._current.sequence:
            return False
        self._current = None
        self._notify(None)
        return True

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    async def aclose(self) -> None:
        """Cancel any pending auto-clear"""
        task = self._clear_task
        self._cancel_clear_task()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _schedule_clear(self, sequence: int, delay: float) -> Optional[asyncio.Task]:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop: the status stays until superseded or cleared
            return None
        return loop.create_task(self._clear_after(sequence, delay))

    async def _clear_after(self, sequence: int, delay: float) -> None:
        await asyncio.sleep(delay)
        self.clear(sequence)

    def _cancel_clear_task(self) -> None:
        if self._clear_task is not None and not self._clear_task.done():
            self._clear_task.cancel()
        self._clear_task = None

    def _notify(self, event: Optional[StatusEvent]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Status listener failed: {e}")
