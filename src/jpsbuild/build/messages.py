"""
Typed build messages emitted by build engines.

Engines report progress and diagnostics as a stream of messages. Over the
subprocess protocol every message is one JSON object per line:

    {"kind": "ERROR", "text": "Unresolved reference: foo", "source_path": "/p/app/src/Main.kt"}
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class MessageKind(Enum):
    """Build message kind."""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    PROGRESS = "PROGRESS"
    JPS_INFO = "JPS_INFO"
    OTHER = "OTHER"

    @classmethod
    def from_string(cls, value: str) -> "MessageKind":
        """Convert string to MessageKind, defaulting to OTHER if unknown."""
        normalized = value.strip().upper()
        if normalized == "INTERNAL_BUILDER_ERROR":
            return cls.INTERNAL_ERROR
        try:
            return cls(normalized)
        except ValueError:
            return cls.OTHER

    @property
    def is_fatal(self) -> bool:
        return self in (MessageKind.ERROR, MessageKind.INTERNAL_ERROR)


@dataclass(frozen=True)
class BuildMessage:
    """Engine → orchestrator: one build message.

    Attributes:
        kind: Message kind
        text: Human-readable message text
        source_path: File the message refers to, if any
    """

    kind: MessageKind
    text: str
    source_path: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind.value, "text": self.text, "source_path": self.source_path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildMessage":
        """Create BuildMessage from dictionary."""
        return cls(
            kind=MessageKind.from_string(str(data.get("kind", "OTHER"))),
            text=str(data.get("text", "")),
            source_path=data.get("source_path"),
        )

    @classmethod
    def from_line(cls, line: str) -> "BuildMessage":
        """Parse one line of engine output.

        JSON objects become typed messages; any other line is an INFO message.
        """
        stripped = line.strip()
        if stripped.startswith("{"):
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError:
                data = None
            if isinstance(data, dict):
                return cls.from_dict(data)
        return cls(kind=MessageKind.INFO, text=line.rstrip("\r\n"))

    def __str__(self) -> str:
        location = f"{self.source_path}: " if self.source_path else ""
        return f"{self.kind.value}: {location}{self.text}"
