"""Style configuration and the CSS custom-property cascade."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from importlib import resources
from typing import TYPE_CHECKING

from .parser import BEGIN_MARKERS, STYLE_BEGIN, STYLE_END, split_lines

if TYPE_CHECKING:
    from collections.abc import Iterable

LOGGER = logging.getLogger(__name__)

_COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)
_TOKEN_PATTERN = re.compile(r"[{};]|[^{};]+")


@dataclass
class DiagramStyle:
    """User-facing style configuration shared by both diagram kinds."""

    # Colors
    background_color: str = "#FFFFFF"
    font_color: str = "#333333"

    # Dimensions
    margin: float = 30
    padding: float = 10
    font_size: float = 12
    char_width: float = 7  # Average advance of one character
    spacing_x: float = 60
    spacing_y: float = 80

    # Fonts
    font_family: str = "'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif"

    def with_font_family(self, family: str) -> DiagramStyle:
        return replace(self, font_family=family)

    def with_background_color(self, color: str) -> DiagramStyle:
        return replace(self, background_color=color)

    def with_font_color(self, color: str) -> DiagramStyle:
        return replace(self, font_color=color)

    def to_css(self) -> str:
        """Base rules derived from this style, layered over the default sheet."""
        return (
            f".diagram-background {{ fill: {self.background_color}; }}\n"
            f"text {{ font-family: {self.font_family}; "
            f"font-size: {self.font_size:g}px; fill: {self.font_color}; }}"
        )


DEFAULT_STYLE = DiagramStyle()


@lru_cache(maxsize=None)
def load_default_css() -> str:
    """Read the default theme shipped with the package."""
    with resources.files(__package__).joinpath("data/default_theme.css").open(
        "r", encoding="utf-8"
    ) as fh:
        return fh.read()


def extract_inline_css(source: str) -> str | None:
    """Return the ``@start_style`` ... ``@end_style`` block of a source.

    ``//`` comment lines are dropped and a block left open ends at the next
    begin marker. Returns None when there is no block or the block is empty.
    """
    in_style = False
    css_lines = []

    for line in split_lines(source):
        trimmed = line.strip()
        if trimmed == STYLE_BEGIN:
            in_style = True
            continue
        if trimmed == STYLE_END or (in_style and trimmed.startswith(BEGIN_MARKERS)):
            break
        if in_style and not trimmed.startswith("//"):
            css_lines.append(line)

    if not any(line.strip() for line in css_lines):
        return None
    return "\n".join(css_lines)


def parse_number(value: str) -> float | None:
    """Parse ``12``, ``12.5`` or ``12px``; None when not numeric."""
    value = value.strip().rstrip(";").strip()
    if value.endswith("px"):
        value = value[:-2].strip()
    try:
        return float(value)
    except ValueError:
        return None


class CssProperties:
    """Numeric custom properties (``--name: value``) per CSS class.

    Only the simplified subset needed for SVG attributes is understood: a
    ``.class`` selector (or comma list of them) opens a block, and each
    ``--name: number[px]`` declaration inside it, nested blocks included, is
    recorded for that class. Sheets merged later override earlier values per
    property.
    """

    def __init__(self) -> None:
        self._properties: dict[str, dict[str, float]] = {}

    @classmethod
    def from_css(cls, css: str) -> CssProperties:
        props = cls()
        props.merge_css(css)
        return props

    @classmethod
    def from_layers(cls, sheets: Iterable[str]) -> CssProperties:
        """Build the cascade from sheets ordered lowest priority first."""
        props = cls()
        for css in sheets:
            props.merge_css(css)
        return props

    def merge_css(self, css: str) -> None:
        self.merge(self._parse(css))

    def merge(self, other: CssProperties | dict[str, dict[str, float]]) -> None:
        table = other._properties if isinstance(other, CssProperties) else other
        for category, values in table.items():
            self._properties.setdefault(category, {}).update(values)

    def get(self, category: str, prop: str) -> float | None:
        return self._properties.get(category, {}).get(prop)

    def get_or(self, category: str, prop: str, default: float) -> float:
        value = self.get(category, prop)
        return default if value is None else value

    def categories(self) -> list[str]:
        return list(self._properties)

    def as_dict(self) -> dict[str, dict[str, float]]:
        return {category: dict(values) for category, values in self._properties.items()}

    @staticmethod
    def _parse(css: str) -> dict[str, dict[str, float]]:
        table: dict[str, dict[str, float]] = {}
        # One entry per open brace: the classes it names, or () for other blocks
        stack: list[tuple[str, ...]] = []
        pending = ""

        for token in _TOKEN_PATTERN.findall(_COMMENT_PATTERN.sub("", css)):
            if token == "{":
                stack.append(_selector_classes(pending))
                pending = ""
            elif token == "}":
                _record(table, stack, pending)
                if stack:
                    stack.pop()
                pending = ""
            elif token == ";":
                _record(table, stack, pending)
                pending = ""
            else:
                pending += token

        # A last declaration may omit its semicolon
        _record(table, stack, pending)
        return table


def _selector_classes(selector: str) -> tuple[str, ...]:
    classes = []
    for part in selector.split(","):
        part = part.strip()
        if part.startswith("."):
            name = re.split(r"[\s.:>+~\[]", part[1:], maxsplit=1)[0]
            if name:
                classes.append(name)
    return tuple(classes)


def _record(
    table: dict[str, dict[str, float]],
    stack: list[tuple[str, ...]],
    declaration: str,
) -> None:
    declaration = declaration.strip()
    if not declaration.startswith("--"):
        return

    owners = next((classes for classes in reversed(stack) if classes), ())
    if not owners:
        return

    name, sep, raw_value = declaration[2:].partition(":")
    value = parse_number(raw_value) if sep else None
    if value is None:
        LOGGER.debug("Skipping non-numeric custom property %r", declaration)
        return

    for category in owners:
        table.setdefault(category, {})[name.strip()] = value
