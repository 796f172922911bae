"""Generation lifecycle state machine.

States move `IDLE -> GENERATING -> SUCCESS | ERROR` and back to `GENERATING`
on the next generate action. At most one generation is in flight; each
`begin` hands out a token so a late response from a superseded generation
cannot overwrite newer state.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .errors import GenerationInProgressError, ValidationError
from .models.datatypes import GenerationResult, Notification


SUCCESS_MESSAGE = "Audio generated successfully!"


class LifecycleStatus(str, Enum):
    """User-visible generation status."""

    IDLE = "idle"
    GENERATING = "generating"
    SUCCESS = "success"
    ERROR = "error"


class GenerationLifecycle:
    """Track generation status, the last good result, and notifications."""

    def __init__(self, notify: Callable[[Notification], None] | None = None) -> None:
        """Initialize in `IDLE` with an optional notification listener."""

        self.status = LifecycleStatus.IDLE
        self.message: str | None = None
        self.result: GenerationResult | None = None
        self.notifications: list[Notification] = []
        self._notify = notify
        self._last_token = 0
        self._active_token: int | None = None

    @property
    def is_generating(self) -> bool:
        return self.status is LifecycleStatus.GENERATING

    def begin(self, text: str) -> int:
        """Enter `GENERATING` and return the token for this generation.

        Raises:
            ValidationError: If `text` is empty.
            GenerationInProgressError: If a generation is already running.
        """

        if self.is_generating:
            raise GenerationInProgressError()
        if not text or not text.strip():
            raise ValidationError("Text is required.")
        self._last_token += 1
        self._active_token = self._last_token
        self.status = LifecycleStatus.GENERATING
        self.message = None
        return self._last_token

    def succeed(self, token: int, result: GenerationResult) -> bool:
        """Apply a successful result; return `False` for a stale token."""

        if token != self._active_token:
            return False
        self._active_token = None
        self.result = result
        self.status = LifecycleStatus.SUCCESS
        self.message = SUCCESS_MESSAGE
        self.notify("success", SUCCESS_MESSAGE)
        return True

    def fail(self, token: int, error: BaseException) -> bool:
        """Apply a failure, keeping the last good result; `False` for a stale token."""

        if token != self._active_token:
            return False
        self._active_token = None
        self.status = LifecycleStatus.ERROR
        self.message = str(error) or type(error).__name__
        self.notify("error", self.message)
        return True

    def reset(self) -> None:
        """Return to `IDLE` without discarding the last good result."""

        self._active_token = None
        self.status = LifecycleStatus.IDLE
        self.message = None

    def notify(self, level: str, message: str) -> Notification:
        """Record a notification and forward it to the listener."""

        notification = Notification(level=level, message=message)
        self.notifications.append(notification)
        if self._notify is not None:
            self._notify(notification)
        return notification
