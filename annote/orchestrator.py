"""Pipeline orchestration: discover, read, annotate and write source files."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from .assembler import DocumentAssembler
from .config import AnnoteConfig
from .discovery import SourceScanner
from .errors import AnnotationError, ReadFailure, RenderFailure
from .logging import get_logger
from .models import AnnotatedDocument, FileOutcome, RunReport, SourceFile
from .parsing import segment_source
from .rendering import render_blocks, style_defs
from .writer import DocumentWriter, output_path_for


class Annotator:
    """Coordinates the per-file annotate pipeline for a configured run.

    Every file runs read -> segment -> render -> assemble -> write on its own.
    A failing file is recorded in the report and the batch carries on, unless
    `fail_fast` is set, in which case the first failure is raised.
    """

    def __init__(
        self,
        config: AnnoteConfig | None = None,
        scanner: SourceScanner | None = None,
        assembler: DocumentAssembler | None = None,
        writer: DocumentWriter | None = None,
    ) -> None:
        self.config = config or AnnoteConfig()
        self.scanner = scanner or SourceScanner()
        self.assembler = assembler or DocumentAssembler(self.config.layout, self.config.block)
        self.writer = writer or DocumentWriter()
        self.logger = get_logger("orchestrator")

    def discover(self) -> List[SourceFile]:
        return self.scanner.scan(
            self.config.path,
            self.config.match,
            maxdepth=self.config.maxdepth,
            exclude=self.config.exclude_paths,
        )

    def run(self, sources: Optional[Sequence[SourceFile]] = None) -> RunReport:
        """Annotate every source file, collecting one outcome per file in order."""
        if sources is None:
            sources = self.discover()
        report = RunReport()
        if not sources:
            self.logger.warning("No files matching %s under %s", self.config.match, self.config.path)
            return report

        with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
            futures = [executor.submit(self._process, source) for source in sources]
            for future in futures:
                outcome = future.result()
                if outcome.error is not None and self.config.fail_fast:
                    for pending in futures:
                        pending.cancel()
                    raise outcome.error
                report.outcomes.append(outcome)

        self.logger.info(
            "Annotated %d of %d file(s)", len(report.succeeded), len(report.outcomes)
        )
        return report

    def annotate_file(self, source: SourceFile) -> FileOutcome:
        """Run the full pipeline for one file, raising `AnnotationError` on failure."""
        output = output_path_for(source, self.config.write_to)
        self.logger.info("Annotating: %s -> %s", source.path, output)

        text = self.read_source(source.path)
        markup = self.annotate_source(
            text,
            source.path.as_posix(),
            title=source.title,
            filename=source.path.name,
        )
        self.writer.write(output, markup)
        return FileOutcome(source=source.path, output=output, characters=len(markup))

    def annotate_source(
        self,
        text: str,
        file: str,
        *,
        title: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> str:
        """Turn raw source text into an HTML document without touching the filesystem."""
        return self.render_document(text, file, title=title, filename=filename).html

    def render_document(
        self,
        text: str,
        file: str,
        *,
        title: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> AnnotatedDocument:
        self.logger.debug("Parsing: %s", file)
        blocks = segment_source(text)
        rendering = self.config.rendering
        try:
            rendered = render_blocks(blocks, rendering, filename or Path(file).name)
            markup = self.assembler.assemble(
                file,
                rendered,
                title=title,
                highlight_css=style_defs(rendering),
            )
        except Exception as exc:
            raise RenderFailure(file, exc) from exc
        self.logger.debug("Parsed: %s (%d blocks, %d chars)", file, len(blocks), len(markup))
        return AnnotatedDocument(html=markup, blocks=len(blocks))

    def read_source(self, path: Path) -> str:
        self.logger.debug("Reading: %s", path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadFailure(path, exc) from exc

    def _process(self, source: SourceFile) -> FileOutcome:
        try:
            return self.annotate_file(source)
        except AnnotationError as exc:
            self.logger.error("%s", exc)
            return FileOutcome(
                source=source.path,
                output=output_path_for(source, self.config.write_to),
                error=exc,
            )


__all__ = ["Annotator"]
