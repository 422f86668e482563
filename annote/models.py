"""Core data models shared across annote components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import AnnotationError


class LineKind(Enum):
    """Syntactic classification of a single source line."""

    BLANK = "blank"
    COMMENT_START = "comment_start"
    COMMENT_BODY = "comment_body"
    CODE = "code"

    @property
    def is_comment(self) -> bool:
        return self in (LineKind.COMMENT_START, LineKind.COMMENT_BODY)


@dataclass(frozen=True)
class ClassifiedLine:
    """A line tagged with its kind; `text` is the stripped comment body for comments."""

    kind: LineKind
    text: str
    raw: str


@dataclass(frozen=True)
class Block:
    """One prose/code pair of the annotated output, in source order."""

    prose: Tuple[str, ...] = ()
    code: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RenderedBlock:
    """Markup produced for a single block."""

    prose: str
    code: str


@dataclass(frozen=True)
class AnnotatedDocument:
    """Final markup for one source text plus the number of blocks it holds."""

    html: str
    blocks: int


@dataclass(frozen=True)
class RenderingConfig:
    """Rendering switches fixed for the lifetime of one run."""

    use_prose_markup: bool = True
    use_code_highlight: bool = True
    highlight_style: str = "default"


@dataclass(frozen=True)
class SourceFile:
    """A discovered source file.

    `path` is the path as discovered (root joined with the relative part) and
    `relative` is its location under the scan root.
    """

    path: Path
    relative: Path

    @property
    def title(self) -> str:
        return f"{self.path.as_posix()} - annote"


@dataclass
class FileOutcome:
    """Result of annotating one file within a batch."""

    source: Path
    output: Path
    error: Optional[AnnotationError] = None
    characters: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunReport:
    """Ordered outcomes for every file processed in a run."""

    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


__all__ = [
    "AnnotatedDocument",
    "Block",
    "ClassifiedLine",
    "FileOutcome",
    "LineKind",
    "RenderedBlock",
    "RenderingConfig",
    "RunReport",
    "SourceFile",
]
