"""Tests for pilluml/svg.py: the SVG element builder."""
from __future__ import annotations

import pytest
from lxml import etree

from pilluml.svg import SVG_NS, SvgBuilder, fmt, format_points, xml_text

NS = {"svg": SVG_NS}


def parse(svg: SvgBuilder):
    return etree.fromstring(svg.to_string().encode())


class TestFormatting:
    @pytest.mark.parametrize("value,expected", [
        (30.0, "30"),
        (12.345, "12.35"),
        (266.5, "266.5"),
        (-0.001, "0"),
        (0, "0"),
    ])
    def test_fmt(self, value, expected):
        assert fmt(value) == expected

    def test_format_points(self):
        assert format_points([(0, 0), (10, 3.5)]) == "0,0 10,3.5"

    @pytest.mark.parametrize("raw,expected", [
        ("tab\x01here", "tabhere"),
        ("nul\x00", "nul"),
        ("\x0b\x0c\x1f\ufffe", ""),
        ("keep\ttab\nand \u2028 \U0001F600", "keep\ttab\nand \u2028 \U0001F600"),
    ])
    def test_xml_text(self, raw, expected):
        assert xml_text(raw) == expected


class TestSvgBuilder:
    def test_root_and_background(self):
        root = parse(SvgBuilder(200, 100.5))
        assert root.tag == f"{{{SVG_NS}}}svg"
        assert root.get("width") == "200"
        assert root.get("height") == "100.5"
        background = root.find("svg:rect", NS)
        assert background.get("class") == "diagram-background"

    def test_style_block_layers_in_order(self):
        svg = SvgBuilder(
            10, 10,
            base_sheets=[".class { --rx: 4; }"],
            file_sheets=[".class { --rx: 8; }"],
            inline_css=".class { --rx: 12; }",
        )
        css = parse(svg).find("svg:style", NS).text
        assert css.index("--rx: 4") < css.index("Style file overrides")
        assert css.index("--rx: 8") < css.index("Inline style overrides")
        assert css.index("Inline style overrides") < css.index("--rx: 12")
        assert svg.prop("class", "rx") == 12

    def test_style_block_is_cdata(self):
        svg = SvgBuilder(10, 10, base_sheets=["text { fill: #000; }"])
        assert "<![CDATA[" in svg.to_string()

    def test_text_is_escaped(self):
        svg = SvgBuilder(10, 10)
        svg.text(1, 2, "<<a & b>>", "label")
        out = svg.to_string()
        assert "&lt;&lt;a &amp; b&gt;&gt;" in out
        assert parse(svg).find("svg:text", NS).text == "<<a & b>>"

    def test_control_characters_dropped_from_text(self):
        svg = SvgBuilder(10, 10)
        svg.text(1, 2, "Fo\x02o\x00", "label")
        assert parse(svg).find("svg:text", NS).text == "Foo"

    def test_control_characters_dropped_from_css(self):
        svg = SvgBuilder(10, 10, inline_css=".class { --rx: 3; }\x01")
        css = parse(svg).find("svg:style", NS).text
        assert "\x01" not in css
        assert svg.prop("class", "rx") == 3

    def test_rect_attributes(self):
        svg = SvgBuilder(10, 10)
        element = svg.rect(1, 2, 3, 4, "box", rx=5, ry=6, filter_id="shadow")
        assert element.get("rx") == "5"
        assert element.get("ry") == "6"
        assert element.get("filter") == "url(#shadow)"

    def test_polyline_markers(self):
        svg = SvgBuilder(10, 10)
        element = svg.polyline([(0, 0), (5, 0)], "edge", marker_start="a", marker_end="b")
        assert element.get("points") == "0,0 5,0"
        assert element.get("marker-start") == "url(#a)"
        assert element.get("marker-end") == "url(#b)"

    def test_defs_created_once(self):
        svg = SvgBuilder(10, 10)
        svg.marker("m1", "0 0 10 10", 10, 5, 10, 10)
        svg.marker("m2", None, 9, 3.5, 10, 7, orient="auto")
        root = parse(svg)
        assert len(root.findall("svg:defs", NS)) == 1
        assert len(root.findall("svg:defs/svg:marker", NS)) == 2


class TestShadows:
    def test_no_shadow_without_properties(self):
        svg = SvgBuilder(10, 10, base_sheets=[".class { --rx: 4; }"])
        assert not svg.has_shadow("class")
        assert not svg.shadow_filter("class", "class-shadow")
        assert parse(svg).find("svg:defs", NS) is None

    def test_shadow_filter_declared(self):
        svg = SvgBuilder(10, 10, base_sheets=[".class { --shadow-dx: 2; --shadow-blur: 3; }"])
        assert svg.shadow_filter("class", "class-shadow")
        drop = parse(svg).find("svg:defs/svg:filter/svg:feDropShadow", NS)
        assert drop.get("dx") == "2"
        assert drop.get("dy") == "0"
        assert drop.get("stdDeviation") == "3"
        assert drop.get("flood-opacity") == "0.3"
