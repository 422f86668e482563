"""Binds rendered blocks and file metadata into the final HTML document."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from jinja2 import Environment, FileSystemLoader, Template, TemplateError, select_autoescape
from markupsafe import Markup

from .config import ConfigError
from .models import RenderedBlock

_DEFAULT_TEMPLATES = Path(__file__).with_name("templates")
LAYOUT_TEMPLATE = "layout.html"
BLOCK_TEMPLATE = "block.html"


class DocumentAssembler:
    """Renders the repeating block template and the outer layout template.

    Custom `layout` and `block` files replace the packaged defaults. Rendered
    prose and code are trusted markup; title and path are escaped.
    """

    def __init__(self, layout: Path | None = None, block: Path | None = None) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(_DEFAULT_TEMPLATES)),
            autoescape=select_autoescape(default=True, default_for_string=True),
            keep_trailing_newline=True,
        )
        self._layout = self._load(layout, LAYOUT_TEMPLATE)
        self._block = self._load(block, BLOCK_TEMPLATE)

    def assemble(
        self,
        file: str,
        blocks: Iterable[RenderedBlock],
        *,
        title: Optional[str] = None,
        highlight_css: str = "",
    ) -> str:
        fragments = [
            self._block.render(block={"prose": Markup(block.prose), "code": Markup(block.code)})
            for block in blocks
        ]
        return self._layout.render(
            title=title or f"{file} - annote",
            file=file,
            highlight_css=Markup(highlight_css),
            annotated_source=Markup("".join(fragments)),
        )

    def _load(self, path: Path | None, default_name: str) -> Template:
        try:
            if path is None:
                return self._env.get_template(default_name)
            source = Path(path).expanduser().read_text(encoding="utf-8")
            return self._env.from_string(source)
        except OSError as exc:
            raise ConfigError(f"Cannot read template {path}: {exc}") from exc
        except TemplateError as exc:
            raise ConfigError(f"Invalid template {path or default_name}: {exc}") from exc


__all__ = ["BLOCK_TEMPLATE", "DocumentAssembler", "LAYOUT_TEMPLATE"]
