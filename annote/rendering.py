"""Per-block rendering: Markdown prose and highlighted code."""

from __future__ import annotations

from html import escape
from typing import Iterable, List, Optional

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import JavascriptLexer, get_lexer_for_filename
from pygments.util import ClassNotFound

from .models import Block, RenderedBlock, RenderingConfig

_MARKDOWN_PLUGINS: tuple[str, ...] = ("table", "strikethrough")
_CODE_OPEN = "<pre><code>"
_CODE_CLOSE = "</code></pre>"
# Keep blank lines at the edges of a code block; they are part of its layout.
_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


def wrap_code_block(markup: str) -> str:
    return f"{_CODE_OPEN}{markup}{_CODE_CLOSE}"


def resolve_lexer(filename: Optional[str]) -> Lexer:
    """Return a lexer for `filename`, falling back to JavaScript."""
    if filename:
        try:
            return get_lexer_for_filename(filename, **_LEXER_OPTIONS)
        except ClassNotFound:
            pass
    return JavascriptLexer(**_LEXER_OPTIONS)


class BlockRenderer:
    """Renders blocks for one file under a fixed rendering configuration."""

    def __init__(self, config: RenderingConfig | None = None, filename: str | None = None) -> None:
        self.config = config or RenderingConfig()
        self._markdown = mistune.create_markdown(escape=False, plugins=list(_MARKDOWN_PLUGINS))
        self._formatter = HtmlFormatter(nowrap=True, style=self.config.highlight_style)
        self._lexer = resolve_lexer(filename) if self.config.use_code_highlight else None

    def render(self, block: Block) -> RenderedBlock:
        return RenderedBlock(prose=self.render_prose(block), code=self.render_code(block))

    def render_prose(self, block: Block) -> str:
        text = "\n".join(block.prose)
        if not self.config.use_prose_markup:
            return text
        return self._markdown(text)

    def render_code(self, block: Block) -> str:
        text = "\n".join(block.code)
        if self._lexer is None:
            return wrap_code_block(escape(text, quote=False))
        return wrap_code_block(highlight(text, self._lexer, self._formatter))

    def style_defs(self) -> str:
        return style_defs(self.config)


def style_defs(config: RenderingConfig | None = None) -> str:
    """CSS rules for the highlight classes, empty when highlighting is off."""
    config = config or RenderingConfig()
    if not config.use_code_highlight:
        return ""
    return HtmlFormatter(style=config.highlight_style).get_style_defs(".annotated-code")


def render_blocks(
    blocks: Iterable[Block],
    config: RenderingConfig | None = None,
    filename: str | None = None,
) -> List[RenderedBlock]:
    """Render every block in order with a single renderer."""
    renderer = BlockRenderer(config, filename)
    return [renderer.render(block) for block in blocks]


__all__ = ["BlockRenderer", "render_blocks", "resolve_lexer", "style_defs", "wrap_code_block"]
