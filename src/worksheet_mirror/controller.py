"""
Module: controller

Purpose:
    Orchestrate the complete worksheet build pipeline.
    Read → Ingest / Synthesize → Worksheet → Render → Export

Key Functions:
    - build_worksheet(): Main entry point for building a worksheet
    - load_worksheet(): Producer output -> Worksheet value
    - render_worksheet(): Render one view of a Worksheet value

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - ingest: Producer output parsing
    - synthesis: Topic layout
    - layout: Page rendering
    - output: PDF/PNG export
    - images: Source page loading

Used By:
    - cli: Command line entry point
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

from worksheet_mirror.core.models import Worksheet, WorksheetKind

from .config import BuildConfig, BuildMode, OutputFormat
from .images import SourceImageError, load_source_image
from .ingest import MISSING_TITLE_WARNING, ingest_analysis, parse_text_block, problem_records
from .layout import (
    PageConfig,
    RenderOptions,
    has_answer_key,
    render_answer_key,
    render_page,
    shows_answer,
)
from .output import render_to_pdf, save_png
from .synthesis import synthesize_layout

logger = logging.getLogger(__name__)

WORKSHEET_JSON = "worksheet.json"
WORKSHEET_PDF = "worksheet.pdf"
ANSWER_KEY_PAGE = "answer-key"


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        worksheet: The worksheet value that was rendered
        output_dir: Directory holding every output file
        pdf_path: Path to the PDF (if generated)
        png_paths: Paths to page PNGs (if generated)
        page_names: View name of each page, in order
        worksheet_json: Path to the serialized worksheet
        warnings: Any warnings during build

    Example:
        >>> result = build_worksheet(config)
        >>> print(f"Generated {result.page_count} pages in {result.output_dir}")
    """

    worksheet: Worksheet
    output_dir: Path
    pdf_path: Optional[Path]
    png_paths: Tuple[Path, ...]
    page_names: Tuple[str, ...]
    worksheet_json: Path
    warnings: Tuple[str, ...]

    @property
    def page_count(self) -> int:
        return len(self.page_names)


def load_worksheet(config: BuildConfig, warnings: List[str]) -> Worksheet:
    """
    Read producer output and build the Worksheet value.

    Mirror mode ingests analysis output; topic mode parses PROBLEM blocks
    and synthesizes the layout.

    Raises:
        BuildError: If the input cannot be read
    """
    try:
        text = Path(config.input_path).read_text(encoding="utf-8")
    except OSError as e:
        raise BuildError(f"Failed to read input {config.input_path}: {e}") from e

    if config.mode is BuildMode.MIRROR:
        ingested = ingest_analysis(text)
        warnings.extend(ingested.warnings)
        title = config.title or ingested.title or f"{Path(config.input_path).stem} Reflection"
        return Worksheet(
            title=title,
            kind=WorksheetKind.MIRROR,
            elements=tuple(ingested.elements),
            source_image=config.source_image,
        )

    document = parse_text_block(text)
    if not document.has_title:
        warnings.append(MISSING_TITLE_WARNING)
        logger.warning(MISSING_TITLE_WARNING)
    records = problem_records(document, warnings)
    if not records:
        warnings.append("Input contained no problems; worksheet has a header only")
        logger.warning(warnings[-1])
    synthesis = synthesize_layout(
        config.title or document.title,
        records,
        problem_count=config.problem_count,
        word_problem_ratio=config.word_problem_ratio,
        config=config.synthesis_config,
    )
    warnings.extend(synthesis.warnings)
    return Worksheet(
        title=synthesis.title,
        kind=WorksheetKind.TOPIC,
        elements=synthesis.elements,
    )


def _load_source(
    path: Optional[Path],
    config: PageConfig,
    warnings: Optional[List[str]] = None,
) -> Optional[Image.Image]:
    """Load a source page, downgrading failures to a warning."""
    if path is None:
        return None
    try:
        return load_source_image(path, config)
    except SourceImageError as e:
        message = f"{e}; diagrams render as placeholders"
        logger.warning(message)
        if warnings is not None:
            warnings.append(message)
        return None


def render_worksheet(
    worksheet: Worksheet,
    options: Optional[RenderOptions] = None,
    *,
    config: PageConfig = PageConfig(),
) -> Image.Image:
    """
    Render one view of a worksheet.

    Args:
        worksheet: Worksheet value
        options: View flags; defaults to the original view with the
            worksheet's own show_answers flag
        config: Page configuration

    Returns:
        Page image
    """
    if options is None:
        options = RenderOptions(mirrored=False, show_answers=worksheet.show_answers)
    source = _load_source(worksheet.source_image, config)
    return render_page(worksheet.elements, options, source_image=source, config=config)


def _render_pages(
    worksheet: Worksheet,
    config: BuildConfig,
    source: Optional[Image.Image],
    warnings: List[str],
) -> List[Tuple[str, Image.Image]]:
    """Render every requested view, in output order, as (name, page) pairs."""
    mirror = worksheet.kind is WorksheetKind.MIRROR
    page_config = config.page_config
    pages: List[Tuple[str, Image.Image]] = []

    def add_view(name: str, options: RenderOptions) -> None:
        logger.info(f"Rendering {name} page...")
        pages.append((name, render_page(
            worksheet.elements, options, source_image=source, config=page_config,
        )))

    if config.include_original:
        add_view("original", RenderOptions(mirrored=False, show_answers=False))
    if mirror and config.include_mirrored:
        add_view("mirrored", RenderOptions(mirrored=True, show_answers=False))

    if config.include_answer_key:
        in_place = any(shows_answer(el) for el in worksheet.elements)
        keyed = has_answer_key(worksheet.elements)
        if in_place:
            add_view("answers", RenderOptions(mirrored=mirror, show_answers=True))
        if keyed:
            logger.info("Rendering answer key...")
            key_pages = render_answer_key(
                worksheet.elements,
                RenderOptions(mirrored=mirror, show_answers=True),
                title=worksheet.title,
                config=page_config,
            )
            for number, page in enumerate(key_pages, start=1):
                name = ANSWER_KEY_PAGE if number == 1 else f"{ANSWER_KEY_PAGE}-{number}"
                pages.append((name, page))
        if not (in_place or keyed):
            message = "No element carries a solution; answer key skipped"
            logger.warning(message)
            warnings.append(message)

    if not pages:
        raise BuildError("No pages to render for this worksheet")
    return pages


def build_worksheet(config: BuildConfig) -> BuildResult:
    """
    Build a worksheet from start to finish.

    Pipeline:
    1. Read producer output
    2. Ingest elements (mirror) or synthesize a layout (topic)
    3. Load the source page (mirror, optional)
    4. Render each requested view and the answer key
    5. Export PDF/PNG and worksheet.json

    Args:
        config: Build configuration

    Returns:
        BuildResult with paths and warnings

    Raises:
        BuildError: If any step fails

    Example:
        >>> config = BuildConfig(input_path=Path("analysis.txt"), output_dir=Path("output"))
        >>> result = build_worksheet(config)
        >>> print(f"Generated {result.page_count} pages")
    """
    warnings: List[str] = []
    start_time = time.perf_counter()
    page_config = config.page_config

    logger.info(f"Starting {config.mode.value} build from {config.input_path}")

    # 1-2. Worksheet value
    worksheet = load_worksheet(config, warnings)
    logger.info(f"Worksheet '{worksheet.title}' has {worksheet.element_count} element(s)")

    # 3. Source page
    source = _load_source(worksheet.source_image, page_config, warnings)

    # 4. Render
    rendered = _render_pages(worksheet, config, source, warnings)
    pages = [page for _, page in rendered]

    # 5. Export
    output_dir = _generate_output_dir(config, worksheet.title)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildError(f"Failed to create output directory {output_dir}: {e}") from e
    logger.info(f"Output directory: {output_dir}")

    pdf_path = None
    png_paths: List[Path] = []
    try:
        if OutputFormat.PDF in config.formats:
            pdf_path = output_dir / WORKSHEET_PDF
            render_to_pdf(pages, pdf_path, config=page_config, title=worksheet.title)
        if OutputFormat.PNG in config.formats:
            for name, page in rendered:
                png_paths.append(save_png(page, output_dir / f"page-{name}.png"))
    except OSError as e:
        raise BuildError(f"Failed to write output: {e}") from e

    worksheet_json = _write_worksheet(output_dir, worksheet)

    elapsed = time.perf_counter() - start_time
    logger.info(f"Worksheet build completed in {elapsed:.2f}s with {len(warnings)} warning(s)")

    return BuildResult(
        worksheet=worksheet,
        output_dir=output_dir,
        pdf_path=pdf_path,
        png_paths=tuple(png_paths),
        page_names=tuple(name for name, _ in rendered),
        worksheet_json=worksheet_json,
        warnings=tuple(warnings),
    )


def _slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    return slug[:40] or "worksheet"


def _generate_output_dir(config: BuildConfig, title: str) -> Path:
    """
    Create a timestamped subfolder inside the base output directory.

    Returns:
        Path like output/20260115-103045__mirror__algebra_review
    """
    base_dir = Path(config.output_dir) if config.output_dir else Path("output")
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    folder_name = f"{timestamp}__{config.mode.value}__{_slugify(title)}"

    # Handle collisions (unlikely but possible)
    output_path = base_dir / folder_name
    if output_path.exists():
        counter = 1
        while (base_dir / f"{folder_name}({counter})").exists():
            counter += 1
        output_path = base_dir / f"{folder_name}({counter})"

    return output_path


def _write_worksheet(output_dir: Path, worksheet: Worksheet) -> Path:
    """
    Write the worksheet value as JSON.

    Raises:
        BuildError: If writing fails
    """
    path = output_dir / WORKSHEET_JSON
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(worksheet.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug(f"Wrote worksheet to {path}")
    except OSError as e:
        raise BuildError(f"Failed to write worksheet: {e}") from e
    return path
