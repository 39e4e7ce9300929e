"""Shared data models for analyzer outputs fed to the SARIF writer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, Iterable, Optional, Union


class OutputLevel(str, Enum):
    """Severity reported by an analyzer for a single finding."""

    NONE = "none"
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def parse(cls, value: Union["OutputLevel", str, None]) -> "OutputLevel":
        """Return the level for ``value``; unknown or missing values map to ``NONE``."""

        if isinstance(value, cls):
            return value
        if not value:
            return cls.NONE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class Finding:
    """One result reported by an analyzer."""

    rule_id: str
    rule_name: str
    message: str
    level: OutputLevel = OutputLevel.NONE
    location: str = ""
    line: Optional[int] = None
    full_description: Optional[str] = None
    help_uri: Optional[str] = None

    @property
    def description(self) -> str:
        """Long-form rule text, falling back to the rule name when empty."""

        return self.full_description or self.rule_name


FindingStream = Union[AsyncIterable[Finding], Iterable[Finding]]


@dataclass
class ToolRun:
    """Identity of an analyzer invocation and the findings it produces.

    ``results`` is consumed exactly once, front to back.
    """

    name: str
    version: str
    results: FindingStream
    information_uri: Optional[str] = None
