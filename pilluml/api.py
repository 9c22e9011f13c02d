"""Public entry points: detect the diagram kind and run its pipeline."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .parser import ClassDiagramParser, SequenceDiagramParser, is_class_diagram
from .renderer import ClassDiagramRenderer, SequenceDiagramRenderer
from .style import DEFAULT_STYLE, DiagramStyle, extract_inline_css

if TYPE_CHECKING:
    from collections.abc import Sequence
    from os import PathLike

LOGGER = logging.getLogger(__name__)


class DiagramType(Enum):
    """Supported diagram kinds."""

    SEQUENCE = "sequence"
    CLASS = "class"


def detect_diagram_type(source: str) -> DiagramType:
    """Detect the diagram type from its source text."""
    if is_class_diagram(source):
        return DiagramType.CLASS
    return DiagramType.SEQUENCE


def _render(source: str, style: DiagramStyle, file_sheets: Sequence[str]) -> str:
    diagram_type = detect_diagram_type(source)
    LOGGER.debug("Rendering %s diagram", diagram_type.value)

    inline_css = extract_inline_css(source)
    if diagram_type == DiagramType.CLASS:
        model = ClassDiagramParser().parse(source)
        return ClassDiagramRenderer(style).render(model, file_sheets, inline_css)

    model = SequenceDiagramParser().parse(source)
    return SequenceDiagramRenderer(style).render(model, file_sheets, inline_css)


def render_diagram(source: str) -> str:
    """Render a diagram to SVG with default styling.

    Automatically detects whether it's a sequence or class diagram.
    """
    return _render(source, DEFAULT_STYLE, ())


def render_diagram_styled(source: str, style: DiagramStyle) -> str:
    """Render a diagram to SVG with an explicit style configuration."""
    return _render(source, style, ())


def render_with_style_sheets(
    source: str,
    *style_sheets: str,
    style: DiagramStyle | None = None,
) -> str:
    """Render with external style sheets layered in call order.

    The sheets override the default theme and are themselves overridden by
    the ``@start_style`` block of the source.
    """
    return _render(source, style or DEFAULT_STYLE, style_sheets)


class DiagramBuilder:
    """Fluent configuration of a single render.

    Usage:
        svg = (
            create_diagram(source)
            .with_style_file("theme.css")
            .render()
        )
    """

    def __init__(self, source: str):
        self.source = source
        self.style = DEFAULT_STYLE
        self.style_sheets: list[str] = []

    def with_style(self, style: DiagramStyle) -> DiagramBuilder:
        self.style = style
        return self

    def with_style_sheet(self, css: str) -> DiagramBuilder:
        self.style_sheets.append(css)
        return self

    def with_style_file(self, path: str | PathLike[str]) -> DiagramBuilder:
        """Layer a style sheet read from disk.

        A file that cannot be read is reported as a warning and skipped.
        """
        try:
            css = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Could not read style file %s: %s", path, exc)
            return self
        return self.with_style_sheet(css)

    def render(self) -> str:
        return _render(self.source, self.style, self.style_sheets)

    def save(self, filename: str | PathLike[str]) -> str:
        """Render and write the SVG; ``.svg`` is appended when no suffix is given.

        Returns:
            SVG content as string
        """
        svg = self.render()
        path = Path(filename)
        if not path.suffix:
            path = path.with_name(f"{path.name}.svg")
        path.write_text(svg, encoding="utf-8")
        return svg


def create_diagram(source: str) -> DiagramBuilder:
    return DiagramBuilder(source)
