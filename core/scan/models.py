"""Data models for compiled patterns, capture groups and scan traces."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

PERCENT = "%"


class VerbKind(str, Enum):
    """Supported verb characters."""

    BOOL = "t"
    INT = "d"
    STRING = "s"


@dataclass(frozen=True)
class Verb:
    """One placeholder occurrence in a format string."""

    kind: VerbKind
    start: int
    flags: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return f"{PERCENT}{''.join(self.flags)}{self.kind.value}"

    @property
    def max_width(self) -> int | None:
        """Decimal width built from the first run of digit flags, if any."""

        digits: list[str] = []
        for flag in self.flags:
            if flag.isdigit():
                digits.append(flag)
            elif digits:
                break
        if not digits:
            return None
        return int("".join(digits))

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Segment:
    """Literal format text between verbs, with ``%%`` already unescaped."""

    text: str
    start: int


@dataclass(frozen=True)
class CompiledPattern:
    """Immutable result of compiling a format string.

    Holds no per-scan state, so one instance may be scanned from many threads.
    """

    format: str
    verbs: tuple[Verb, ...] = ()
    segments: tuple[Segment, ...] = ()

    @property
    def verb_count(self) -> int:
        return len(self.verbs)

    @property
    def begins_with_verb(self) -> bool:
        return bool(self.verbs) and self.verbs[0].start == 0

    @property
    def ends_with_verb(self) -> bool:
        if not self.verbs:
            return False
        last = self.verbs[-1]
        return last.start == len(self.format) - len(last.text)


@dataclass
class CaptureGroup:
    """Input substring together with the verbs that must be read from it."""

    text: str
    verbs: list[Verb] = field(default_factory=list)


class VerbTrace(BaseModel):
    """Verb entry in a scan trace."""

    model_config = ConfigDict(extra="forbid")

    verb: str
    kind: VerbKind
    start: int
    max_width: int | None = None


class SegmentTrace(BaseModel):
    """Segment entry in a scan trace, with every occurrence found in the input."""

    model_config = ConfigDict(extra="forbid")

    text: str
    start: int
    occurrences: list[int] = Field(default_factory=list)


class CaptureTrace(BaseModel):
    """Capture group entry in a scan trace."""

    model_config = ConfigDict(extra="forbid")

    text: str
    verbs: list[str] = Field(default_factory=list)


class ScanTrace(BaseModel):
    """Step-by-step view of how one input was matched against a format."""

    model_config = ConfigDict(extra="forbid")

    format: str
    input: str
    verbs: list[VerbTrace] = Field(default_factory=list)
    segments: list[SegmentTrace] = Field(default_factory=list)
    alignment: list[int] = Field(default_factory=list)
    captures: list[CaptureTrace] = Field(default_factory=list)
    error: str | None = None
