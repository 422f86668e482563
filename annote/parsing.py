"""Line classification and prose/code segmentation for `//` annotated sources."""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, List

from .models import Block, ClassifiedLine, LineKind

# A bare marker opens a new block, any other marker line is prose.
_START_ANNOTATION = re.compile(r"^\s*//\s*$")
_COMMENT = re.compile(r"^\s*//\s*")
_BLANK_LINE = re.compile(r"^\s*$")


class Mode(Enum):
    IN_PROSE = "prose"
    IN_CODE = "code"


def classify_line(line: str) -> ClassifiedLine:
    """Classify one line of source text.

    Comment checks run before the blank check, so a bare ``//`` is a
    ``COMMENT_START`` rather than a blank line. Code lines are returned verbatim.
    """
    if _START_ANNOTATION.match(line):
        return ClassifiedLine(LineKind.COMMENT_START, "", line)
    if _COMMENT.match(line):
        return ClassifiedLine(LineKind.COMMENT_BODY, _COMMENT.sub("", line, count=1), line)
    if _BLANK_LINE.match(line):
        return ClassifiedLine(LineKind.BLANK, line, line)
    return ClassifiedLine(LineKind.CODE, line, line)


def segment_lines(lines: Iterable[str]) -> List[Block]:
    """Fold source lines into ordered prose/code blocks.

    The fold starts in prose mode with one empty block. A sentinel line seen in
    code mode closes the current block and opens the next one. Blank lines in
    prose mode are dropped; in code mode they are kept verbatim.
    """
    blocks: List[Block] = []
    prose: List[str] = []
    code: List[str] = []
    mode = Mode.IN_PROSE

    for line in lines:
        classified = classify_line(line)
        if mode is Mode.IN_CODE and classified.kind is LineKind.COMMENT_START:
            blocks.append(Block(prose=tuple(prose), code=tuple(code)))
            prose, code = [], []
            mode = Mode.IN_PROSE
        elif mode is Mode.IN_PROSE and classified.kind.is_comment:
            prose.append(classified.text)
        elif mode is Mode.IN_PROSE and classified.kind is LineKind.BLANK:
            continue
        else:
            mode = Mode.IN_CODE
            code.append(classified.raw)

    blocks.append(Block(prose=tuple(prose), code=tuple(code)))
    return blocks


def segment_source(text: str) -> List[Block]:
    """Split raw file contents on newlines and segment them."""
    normalized = text.replace("\r\n", "\n")
    return segment_lines(normalized.split("\n"))


__all__ = ["Mode", "classify_line", "segment_lines", "segment_source"]
