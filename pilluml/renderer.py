"""SVG renderers for laid-out class and sequence diagrams."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .layout import LayoutConfig, lane_bounds, layout_class_diagram, layout_sequence_diagram
from .models import (
    AltElse,
    AltEnd,
    AltStart,
    Divider,
    EntityKind,
    Message,
    Note,
    NotePosition,
    RelationKind,
)
from .routing import label_anchor, route_relationship
from .style import DEFAULT_STYLE, load_default_css
from .svg import SvgBuilder

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import ClassDiagram, ClassEntity, Participant, Relationship, SequenceDiagram
    from .style import DiagramStyle


# CSS category and shadow filter id per entity kind
ENTITY_CATEGORIES = {
    EntityKind.CLASS: ("class", "class-shadow"),
    EntityKind.INTERFACE: ("interface", "interface-shadow"),
    EntityKind.ABSTRACT: ("abstract-class", "abstract-class-shadow"),
    EntityKind.ENUM: ("enum", "enum-shadow"),
}

# (dashed, marker-start, marker-end) per relationship kind
RELATION_MARKERS = {
    RelationKind.INHERITANCE: (False, None, "cls-triangle"),
    RelationKind.REALIZATION: (True, None, "cls-triangle"),
    RelationKind.COMPOSITION: (False, "cls-diamond-filled", None),
    RelationKind.AGGREGATION: (False, "cls-diamond-empty", None),
    RelationKind.ASSOCIATION: (False, None, None),
    RelationKind.DEPENDENCY: (True, None, "cls-arrow"),
    RelationKind.DIRECTED_ASSOCIATION: (False, None, "cls-arrow"),
}

TRIANGLE_PATH = "M 0 0 L 10 5 L 0 10 z"
DIAMOND_PATH = "M 0 6 L 6 0 L 12 6 L 6 12 z"


def base_sheets(style: DiagramStyle) -> list[str]:
    """Lowest cascade layers: the packaged theme, then the style's own rules."""
    return [load_default_css(), style.to_css()]


class ClassDiagramRenderer:
    """Renders class diagrams to SVG."""

    def __init__(
        self,
        style: DiagramStyle | None = None,
        config: LayoutConfig | None = None,
    ):
        self.style = style or DEFAULT_STYLE
        self.config = config or LayoutConfig()

    def render(
        self,
        diagram: ClassDiagram,
        file_sheets: Sequence[str] = (),
        inline_css: str | None = None,
    ) -> str:
        """Lay out a class diagram and render it to SVG text."""
        layout_class_diagram(diagram, self.style, self.config)

        svg = SvgBuilder(
            diagram.width,
            diagram.height,
            base_sheets(self.style),
            file_sheets,
            inline_css,
        )
        self._render_defs(svg)

        # Connectors first so boxes are drawn over them
        for rel in diagram.relationships:
            self._render_relationship(svg, diagram, rel)

        for entity in diagram.entities.values():
            self._render_entity(svg, entity)

        return svg.to_string()

    def _render_defs(self, svg: SvgBuilder) -> None:
        for category, filter_id in ENTITY_CATEGORIES.values():
            svg.shadow_filter(category, filter_id)

        marker = svg.marker("cls-triangle", "0 0 10 10", 10, 5, 10, 10)
        svg.path(TRIANGLE_PATH, "marker-triangle", parent=marker)
        marker = svg.marker("cls-arrow", "0 0 10 10", 10, 5, 8, 8)
        svg.path(TRIANGLE_PATH, "marker-arrow", parent=marker)
        marker = svg.marker("cls-diamond-filled", "0 0 12 12", 12, 6, 12, 12)
        svg.path(DIAMOND_PATH, "marker-diamond-filled", parent=marker)
        marker = svg.marker("cls-diamond-empty", "0 0 12 12", 12, 6, 12, 12)
        svg.path(DIAMOND_PATH, "marker-diamond-empty", parent=marker)

    def _render_entity(self, svg: SvgBuilder, entity: ClassEntity) -> None:
        """Render one entity box with its compartments."""
        config = self.config
        category, filter_id = ENTITY_CATEGORIES[entity.kind]

        svg.rect(
            entity.x, entity.y, entity.width, entity.height,
            category,
            rx=svg.prop_or(category, "rx", 0),
            ry=svg.prop_or(category, "ry", 0),
            filter_id=filter_id if svg.has_shadow(category) else None,
        )

        center_x = entity.x + entity.width / 2
        y = entity.y

        if entity.stereotype:
            svg.text(center_x, y + 12, f"<<{entity.stereotype}>>", "class-stereotype")
            y += 10

        # Enums share the plain class look
        prefix = "class" if entity.kind == EntityKind.ENUM else category
        svg.text(center_x, y + config.compartment_height / 2 + 4, entity.name, f"{prefix}-name")

        separator = f"{prefix}-separator"
        y = entity.y + config.compartment_height
        svg.line(entity.x, y, entity.x + entity.width, y, separator)

        text_x = entity.x + self.style.padding

        if entity.fields:
            y += 4
            for f in entity.fields:
                y += config.member_height
                svg.text(text_x, y, f.text, _member_class(entity.kind, "field", f.is_static, False))
            y += 4
            svg.line(entity.x, y, entity.x + entity.width, y, separator)

        if entity.methods:
            y += 4
            for m in entity.methods:
                y += config.member_height
                svg.text(
                    text_x, y, m.text,
                    _member_class(entity.kind, "method", m.is_static, m.is_abstract),
                )

    def _render_relationship(
        self,
        svg: SvgBuilder,
        diagram: ClassDiagram,
        rel: Relationship,
    ) -> None:
        source = diagram.entity(rel.source)
        target = diagram.entity(rel.target)
        if source is None or target is None:
            return

        points = route_relationship(source, target, rel.kind, self.config)
        if not points:
            return

        dashed, marker_start, marker_end = RELATION_MARKERS[rel.kind]
        svg.polyline(
            points,
            "relationship relationship-dashed" if dashed else "relationship",
            marker_start=marker_start,
            marker_end=marker_end,
        )

        if rel.label:
            mx, my = label_anchor(points)
            svg.text(mx, my - 5, rel.label, "relationship-label")


def _member_class(kind: EntityKind, member: str, is_static: bool, is_abstract: bool) -> str:
    """CSS classes of a field or method row.

    Abstract classes style both member kinds separately; interfaces only
    style methods; everything else uses the plain class look.
    """
    if kind == EntityKind.ABSTRACT:
        base = f"abstract-class-{member}-name"
    elif kind == EntityKind.INTERFACE and member == "method":
        base = "interface-method-name"
    else:
        base = f"class-{member}-name"

    if is_static:
        return f"{base} {base}-static"
    if is_abstract and kind != EntityKind.INTERFACE:
        return f"{base} {base}-abstract"
    return base


class SequenceDiagramRenderer:
    """Renders sequence diagrams to SVG."""

    def __init__(
        self,
        style: DiagramStyle | None = None,
        config: LayoutConfig | None = None,
    ):
        self.style = style or DEFAULT_STYLE
        self.config = config or LayoutConfig()

    def render(
        self,
        diagram: SequenceDiagram,
        file_sheets: Sequence[str] = (),
        inline_css: str | None = None,
    ) -> str:
        """Lay out a sequence diagram and render it to SVG text."""
        layout_sequence_diagram(diagram, self.style, self.config)
        config = self.config

        svg = SvgBuilder(
            diagram.width,
            diagram.height,
            base_sheets(self.style),
            file_sheets,
            inline_css,
        )
        self._render_defs(svg)

        top_y = self.style.margin
        bottom_y = diagram.height - self.style.margin - config.participant_height

        for p in diagram.participants:
            svg.line(p.x, top_y + config.participant_height, p.x, bottom_y, "lifeline")

        for p in diagram.participants:
            self._render_participant(svg, p, top_y)
            self._render_participant(svg, p, bottom_y)

        lanes = {p.name: p for p in diagram.participants}
        current_y = top_y + config.participant_height + config.first_message_offset
        # Open alt blocks: (start_y, left_x, right_x)
        alt_stack: list[tuple[float, float, float]] = []

        for element in diagram.elements:
            if isinstance(element, Message):
                self._render_message(svg, lanes, element, current_y)
                current_y += config.message_spacing

            elif isinstance(element, Divider):
                self._render_divider(svg, diagram.width, current_y, element.text)
                current_y += config.message_spacing

            elif isinstance(element, AltStart):
                left_x, right_x = lane_bounds(diagram, self.style)
                inset = 5 * len(alt_stack)
                alt_stack.append((current_y, left_x + inset, right_x - inset))
                svg.text(
                    left_x + inset + 45, current_y + 11,
                    f"[{element.condition}]", "alt-condition-text",
                )
                current_y += config.message_spacing

            elif isinstance(element, AltElse):
                if alt_stack:
                    _, left_x, right_x = alt_stack[-1]
                    svg.line(left_x, current_y, right_x, current_y, "alt-divider")
                    if element.condition:
                        svg.text(
                            left_x + 5, current_y + 15,
                            f"[{element.condition}]", "alt-condition-text",
                        )
                current_y += config.message_spacing * 0.5

            elif isinstance(element, AltEnd):
                # A stray "end" has nothing to close
                if alt_stack:
                    self._render_alt_box(svg, *alt_stack.pop(), current_y)
                current_y += config.message_spacing * 0.5

            elif isinstance(element, Note):
                participant = lanes.get(element.participant)
                if participant is not None:
                    self._render_note(svg, participant, element, current_y)
                current_y += config.message_spacing

        return svg.to_string()

    def _render_defs(self, svg: SvgBuilder) -> None:
        svg.shadow_filter("participant", "participant-shadow")

        marker = svg.marker("seq-arrow", None, 9, 3.5, 10, 7, orient="auto")
        svg.polygon([(0, 0), (10, 3.5), (0, 7)], "arrow-head", parent=marker)
        marker = svg.marker("seq-arrow-open", None, 9, 3.5, 10, 7, orient="auto")
        svg.path("M 0 0 L 10 3.5 L 0 7", "arrow-head-open", parent=marker)

    def _render_participant(self, svg: SvgBuilder, p: Participant, y: float) -> None:
        height = self.config.participant_height
        svg.rect(
            p.x - p.width / 2, y, p.width, height,
            "participant actor" if p.is_actor else "participant",
            rx=svg.prop_or("participant", "rx", 0),
            ry=svg.prop_or("participant", "ry", 0),
            filter_id="participant-shadow" if svg.has_shadow("participant") else None,
        )
        svg.text(p.x, y + height / 2 + 4, p.name, "participant-text")

    def _render_message(
        self,
        svg: SvgBuilder,
        lanes: dict[str, Participant],
        msg: Message,
        y: float,
    ) -> None:
        source = lanes.get(msg.source)
        target = lanes.get(msg.target)
        if source is None or target is None:
            return

        css_class = "message message-dashed" if msg.style.is_dashed else "message"
        marker = "seq-arrow-open" if msg.style.is_open else "seq-arrow"

        if msg.is_self:
            loop_w = self.config.self_loop_width
            loop_h = self.config.self_loop_height
            points = [
                (source.x, y),
                (source.x + loop_w, y),
                (source.x + loop_w, y + loop_h),
                (source.x, y + loop_h),
            ]
            svg.polyline(points, css_class, marker_end=marker)
            svg.text(
                source.x + loop_w + 5, y + loop_h / 2 + 4,
                msg.text, "message-text self-message-text",
            )
        else:
            svg.polyline([(source.x, y), (target.x, y)], css_class, marker_end=marker)
            svg.text((source.x + target.x) / 2, y - 5, msg.text, "message-text")

    def _render_divider(self, svg: SvgBuilder, width: float, y: float, text: str) -> None:
        margin = self.style.margin
        svg.line(margin, y, width - margin, y, "divider-line")

        text_width = len(text) * self.style.char_width + 20
        svg.rect((width - text_width) / 2, y - 10, text_width, 20, "divider-box")
        svg.text(width / 2, y + 4, text, "divider-text")

    def _render_alt_box(
        self,
        svg: SvgBuilder,
        start_y: float,
        left_x: float,
        right_x: float,
        end_y: float,
    ) -> None:
        svg.rect(left_x, start_y, right_x - left_x, end_y - start_y, "alt-box")
        # Label tab in the top-left corner
        svg.polygon(
            [
                (left_x, start_y),
                (left_x + 30, start_y),
                (left_x + 40, start_y + 15),
                (left_x, start_y + 15),
            ],
            "alt-label-box",
        )
        svg.text(left_x + 5, start_y + 11, "alt", "alt-label-text")

    def _render_note(
        self,
        svg: SvgBuilder,
        participant: Participant,
        note: Note,
        y: float,
    ) -> None:
        width = max(len(note.text) * self.style.char_width + 20, 60)
        height = self.config.note_height
        fold = 8

        if note.position == NotePosition.LEFT:
            x = participant.x - width - 10
        elif note.position == NotePosition.RIGHT:
            x = participant.x + 10
        else:
            x = participant.x - width / 2
        top = y - height / 2

        svg.polygon(
            [
                (x, top),
                (x + width - fold, top),
                (x + width, top + fold),
                (x + width, top + height),
                (x, top + height),
            ],
            "note",
        )
        svg.text(x + fold, top + height / 2 + 4, note.text, "note-text")
