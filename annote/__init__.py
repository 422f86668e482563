"""Annotated source documentation: interleave `//` commentary with the code it describes."""

from .models import Block, LineKind, RenderedBlock, RenderingConfig
from .parsing import classify_line, segment_lines, segment_source
from .rendering import BlockRenderer, render_blocks

__all__ = [
    "Block",
    "BlockRenderer",
    "LineKind",
    "RenderedBlock",
    "RenderingConfig",
    "classify_line",
    "render_blocks",
    "segment_lines",
    "segment_source",
]
