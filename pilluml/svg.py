"""SVG output builder on top of lxml.etree."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lxml import etree

from .style import CssProperties

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

SVG_NS = "http://www.w3.org/2000/svg"

# Characters outside the XML 1.0 Char production
_XML_INVALID = re.compile(
    r"[^\u0009\u000A\u000D\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)

Point = tuple[float, float]


def fmt(value: float) -> str:
    """Format a coordinate compactly: 30.0 -> "30", 12.345 -> "12.35"."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def xml_text(text: str) -> str:
    """Drop characters that cannot appear in an XML document."""
    return _XML_INVALID.sub("", text)


def format_points(points: Iterable[Point]) -> str:
    return " ".join(f"{fmt(x)},{fmt(y)}" for x, y in points)


def url(element_id: str) -> str:
    return f"url(#{element_id})"


class SvgBuilder:
    """Accumulates SVG elements and owns the merged custom-property table.

    Style sheets are layered in this order (lowest to highest priority):
    1. Base sheets (default theme, then rules derived from DiagramStyle)
    2. File sheets (external style sheets, in the order supplied)
    3. Inline sheet (``@start_style`` block of the source)
    The same order is used for the embedded ``<style>`` element and for
    ``prop`` lookups.
    """

    def __init__(
        self,
        width: float,
        height: float,
        base_sheets: Sequence[str] = (),
        file_sheets: Sequence[str] = (),
        inline_css: str | None = None,
    ):
        layers = [*base_sheets, *file_sheets]
        if inline_css:
            layers.append(inline_css)
        self.css_props = CssProperties.from_layers(layers)

        self.root = etree.Element(
            _tag("svg"),
            nsmap={None: SVG_NS},
            width=fmt(width),
            height=fmt(height),
        )
        self._defs: etree._Element | None = None

        parts = list(base_sheets)
        for css in file_sheets:
            parts.append("/* Style file overrides */\n" + css)
        if inline_css:
            parts.append("/* Inline style overrides */\n" + inline_css)
        css_text = xml_text("\n" + "\n".join(parts) + "\n")

        style = etree.SubElement(self.root, _tag("style"), type="text/css")
        style.text = etree.CDATA(css_text) if "]]>" not in css_text else css_text

        self._add("rect", {"width": "100%", "height": "100%",
                           "class": "diagram-background"})

    # ------------------------------------------------------------------
    # Custom properties
    # ------------------------------------------------------------------

    def prop(self, category: str, name: str) -> float | None:
        return self.css_props.get(category, name)

    def prop_or(self, category: str, name: str, default: float) -> float:
        return self.css_props.get_or(category, name, default)

    def has_shadow(self, category: str) -> bool:
        """Check if any shadow property of a category is non-zero."""
        return any(
            self.prop_or(category, name, 0) != 0
            for name in ("shadow-dx", "shadow-dy", "shadow-blur")
        )

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def defs(self) -> etree._Element:
        if self._defs is None:
            self._defs = self._add("defs", {})
        return self._defs

    def marker(
        self,
        marker_id: str,
        view_box: str | None,
        ref_x: float,
        ref_y: float,
        width: float,
        height: float,
        orient: str = "auto-start-reverse",
    ) -> etree._Element:
        attrib = {
            "id": marker_id,
            "refX": fmt(ref_x),
            "refY": fmt(ref_y),
            "markerWidth": fmt(width),
            "markerHeight": fmt(height),
            "orient": orient,
        }
        if view_box:
            attrib = {"id": marker_id, "viewBox": view_box, **attrib}
        return self._add("marker", attrib, self.defs())

    def shadow_filter(self, category: str, filter_id: str) -> bool:
        """Declare a drop-shadow filter when the category defines a shadow.

        Returns:
            True if the filter was declared
        """
        if not self.has_shadow(category):
            return False

        shadow = self._add(
            "filter",
            {"id": filter_id, "x": "-50%", "y": "-50%", "width": "200%", "height": "200%"},
            self.defs(),
        )
        self._add(
            "feDropShadow",
            {
                "dx": fmt(self.prop_or(category, "shadow-dx", 0)),
                "dy": fmt(self.prop_or(category, "shadow-dy", 0)),
                "stdDeviation": fmt(self.prop_or(category, "shadow-blur", 0)),
                "flood-opacity": fmt(self.prop_or(category, "shadow-opacity", 0.3)),
            },
            shadow,
        )
        return True

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        css_class: str,
        rx: float | None = None,
        ry: float | None = None,
        filter_id: str | None = None,
    ) -> etree._Element:
        attrib = {"x": fmt(x), "y": fmt(y), "width": fmt(width), "height": fmt(height)}
        if rx is not None:
            attrib["rx"] = fmt(rx)
        if ry is not None:
            attrib["ry"] = fmt(ry)
        attrib["class"] = css_class
        if filter_id:
            attrib["filter"] = url(filter_id)
        return self._add("rect", attrib)

    def line(self, x1: float, y1: float, x2: float, y2: float, css_class: str) -> etree._Element:
        return self._add(
            "line",
            {"x1": fmt(x1), "y1": fmt(y1), "x2": fmt(x2), "y2": fmt(y2), "class": css_class},
        )

    def text(self, x: float, y: float, content: str, css_class: str) -> etree._Element:
        element = self._add("text", {"x": fmt(x), "y": fmt(y), "class": css_class})
        # Markup characters are escaped by the serializer
        element.text = xml_text(content)
        return element

    def polyline(
        self,
        points: Sequence[Point],
        css_class: str,
        marker_start: str | None = None,
        marker_end: str | None = None,
    ) -> etree._Element:
        attrib = {"points": format_points(points), "class": css_class}
        if marker_start:
            attrib["marker-start"] = url(marker_start)
        if marker_end:
            attrib["marker-end"] = url(marker_end)
        return self._add("polyline", attrib)

    def polygon(
        self,
        points: Sequence[Point],
        css_class: str,
        parent: etree._Element | None = None,
    ) -> etree._Element:
        return self._add("polygon", {"points": format_points(points), "class": css_class}, parent)

    def path(
        self,
        d: str,
        css_class: str,
        parent: etree._Element | None = None,
    ) -> etree._Element:
        return self._add("path", {"d": d, "class": css_class}, parent)

    def to_string(self) -> str:
        return etree.tostring(self.root, encoding="unicode")

    def _add(
        self,
        tag: str,
        attrib: dict[str, str],
        parent: etree._Element | None = None,
    ) -> etree._Element:
        return etree.SubElement(self.root if parent is None else parent, _tag(tag), attrib)


def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"
