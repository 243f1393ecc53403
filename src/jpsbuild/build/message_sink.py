"""Fail-fast handling of the build message stream."""

from enum import Enum
from typing import Callable, Optional

from .messages import BuildMessage, MessageKind


class SinkState(Enum):
    """Message sink state."""

    RUNNING = "running"
    FAILED = "failed"


class BuildFailedError(Exception):
    """Raised when the build reports a fatal message."""

    def __init__(self, message: BuildMessage):
        self.build_message = message
        super().__init__(f"Build failed: {message}")


class MessageSink:
    """
    Observes build messages and stops the build on the first fatal one.

    Every message is surfaced through the printer. An ERROR or INTERNAL_ERROR
    message moves the sink to FAILED and raises BuildFailedError, so nothing
    after it is processed.
    """

    def __init__(self, printer: Optional[Callable[[str], None]] = None):
        self.printer = printer or print
        self.state = SinkState.RUNNING
        self.fatal_message: Optional[BuildMessage] = None
        self.warning_count = 0
        self.message_count = 0

    @property
    def failed(self) -> bool:
        return self.state is SinkState.FAILED

    def __call__(self, message: BuildMessage) -> None:
        self.accept(message)

    def accept(self, message: BuildMessage) -> None:
        """Handle one message.

        Raises:
            BuildFailedError: If the message is fatal or the sink has already failed
        """
        if self.fatal_message is not None:
            raise BuildFailedError(self.fatal_message)

        self.message_count += 1
        if message.kind is MessageKind.WARNING:
            self.warning_count += 1

        self.printer(str(message))

        if message.kind.is_fatal:
            self.state = SinkState.FAILED
            self.fatal_message = message
            raise BuildFailedError(message)

    def check(self) -> None:
        """Raise BuildFailedError if a fatal message was seen."""
        if self.fatal_message is not None:
            raise BuildFailedError(self.fatal_message)
