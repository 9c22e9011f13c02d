"""Layout algorithms for pilluml diagrams.

Layout mutates the parsed model in place: it only assigns geometry, never
adds or removes entities, and running it twice gives the same coordinates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import networkx as nx

from .models import AltElse, AltEnd, AltStart, Divider, Message, Note
from .style import DEFAULT_STYLE

if TYPE_CHECKING:
    from .models import ClassDiagram, ClassEntity, SequenceDiagram
    from .style import DiagramStyle


@dataclass
class LayoutConfig:
    """Fixed geometry shared by layout, routing and rendering."""

    # Class boxes
    compartment_height: float = 25  # Header band holding the name
    member_height: float = 18  # One field or method row
    min_class_width: float = 120

    # Participants
    participant_height: float = 35
    participant_padding: float = 20
    min_participant_width: float = 80
    participant_spacing: float = 150  # Minimum lane width

    # Vertical rhythm of sequence elements
    message_spacing: float = 40
    first_message_offset: float = 30
    footer_height: float = 40
    self_loop_width: float = 30
    self_loop_height: float = 20
    note_height: float = 24

    # Connector routing
    route_margin: float = 15
    vertical_threshold: float = 20  # Minimum |dy| for vertical routing
    align_tolerance: float = 10  # Max |dx| for a straight vertical line


def estimate_text_width(text: str, char_width: float) -> float:
    """Estimate width of text based on character count."""
    return len(text) * char_width


def entity_texts(entity: ClassEntity) -> list[str]:
    """Every line of text drawn inside an entity box."""
    texts = [entity.name]
    if entity.stereotype:
        texts.append(f"<<{entity.stereotype}>>")
    texts.extend(f.text for f in entity.fields)
    texts.extend(m.text for m in entity.methods)
    return texts


def calculate_entity_dimensions(
    entity: ClassEntity,
    style: DiagramStyle,
    config: LayoutConfig,
) -> tuple[float, float]:
    """Calculate the width and height needed for an entity box.

    Returns:
        (width, height) tuple
    """
    width = max(
        estimate_text_width(text, style.char_width) + style.padding * 2
        for text in entity_texts(entity)
    )
    width = max(width, config.min_class_width)

    height = config.compartment_height
    if entity.fields:
        height += len(entity.fields) * config.member_height + style.padding
    if entity.methods:
        height += len(entity.methods) * config.member_height + style.padding

    return width, max(height, config.compartment_height * 2)


def size_entities(
    diagram: ClassDiagram,
    style: DiagramStyle,
    config: LayoutConfig,
) -> None:
    for entity in diagram.entities.values():
        entity.width, entity.height = calculate_entity_dimensions(entity, style, config)


def build_hierarchy(diagram: ClassDiagram) -> nx.DiGraph:
    """Build the layering graph.

    Inheritance and realization edges run parent -> child; composition and
    aggregation edges run owner -> part. Other relationships do not affect
    layering.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(diagram.entities)

    for rel in diagram.relationships:
        if rel.kind.is_hierarchy:
            graph.add_edge(rel.target, rel.source)
        elif rel.kind.is_ownership:
            graph.add_edge(rel.source, rel.target)

    return graph


def find_roots(diagram: ClassDiagram) -> list[str]:
    """Entities that do not inherit from or realize anything.

    Falls back to the first entity when every entity has a parent.
    """
    children = {rel.source for rel in diagram.relationships if rel.kind.is_hierarchy}
    roots = [name for name in diagram.entities if name not in children]
    if not roots and diagram.entities:
        roots = [next(iter(diagram.entities))]
    return roots


def assign_layers(diagram: ClassDiagram) -> dict[str, int]:
    """Assign each entity a layer index by breadth-first search from the roots.

    Entities the search never reaches go one layer below the deepest one.
    """
    if not diagram.entities:
        return {}

    graph = build_hierarchy(diagram)
    layers: dict[str, int] = {}
    for depth, names in enumerate(nx.bfs_layers(graph, find_roots(diagram))):
        for name in names:
            layers[name] = depth

    unreached = max(layers.values(), default=-1) + 1
    return {name: layers.get(name, unreached) for name in diagram.entities}


def layout_class_diagram(
    diagram: ClassDiagram,
    style: DiagramStyle | None = None,
    config: LayoutConfig | None = None,
) -> None:
    """Size and position every entity, then record the canvas size."""
    if style is None:
        style = DEFAULT_STYLE
    if config is None:
        config = LayoutConfig()

    size_entities(diagram, style, config)

    # Group by layer; dict order keeps first-seen order inside a layer
    groups: dict[int, list[ClassEntity]] = {}
    for name, layer in assign_layers(diagram).items():
        groups.setdefault(layer, []).append(diagram.entities[name])

    current_y = style.margin
    for layer in sorted(groups):
        current_x = style.margin
        for entity in groups[layer]:
            entity.x = current_x
            entity.y = current_y
            current_x += entity.width + style.spacing_x
        current_y += max(e.height for e in groups[layer]) + style.spacing_y

    diagram.width, diagram.height = class_diagram_bounds(diagram, style)


def class_diagram_bounds(diagram: ClassDiagram, style: DiagramStyle) -> tuple[float, float]:
    max_x = max((e.x + e.width for e in diagram.entities.values()), default=0)
    max_y = max((e.y + e.height for e in diagram.entities.values()), default=0)
    return max_x + style.margin, max_y + style.margin


def count_sequence_rows(diagram: SequenceDiagram) -> int:
    """Number of vertical increments the element stream needs."""
    row_types = (Message, Divider, AltStart, AltElse, AltEnd, Note)
    return sum(1 for element in diagram.elements if isinstance(element, row_types))


def layout_sequence_diagram(
    diagram: SequenceDiagram,
    style: DiagramStyle | None = None,
    config: LayoutConfig | None = None,
) -> None:
    """Place participant lanes left to right and record the canvas size."""
    if style is None:
        style = DEFAULT_STYLE
    if config is None:
        config = LayoutConfig()

    current_x = style.margin
    for p in diagram.participants:
        p.width = max(
            estimate_text_width(p.name, style.char_width) + config.participant_padding * 2,
            config.min_participant_width,
        )
        p.x = current_x + p.width / 2
        current_x += max(p.width, config.participant_spacing)

    if diagram.participants:
        last = diagram.participants[-1]
        diagram.width = last.x + last.width / 2 + style.margin
    else:
        diagram.width = 200

    diagram.height = (
        style.margin * 2
        + config.participant_height * 2
        + count_sequence_rows(diagram) * config.message_spacing
        + config.footer_height
    )


def lane_bounds(diagram: SequenceDiagram, style: DiagramStyle) -> tuple[float, float]:
    """Horizontal extent of all lanes, padded for enclosing blocks."""
    if not diagram.participants:
        return style.margin, 200
    first, last = diagram.participants[0], diagram.participants[-1]
    return first.x - first.width / 2 - 10, last.x + last.width / 2 + 10


def get_connection_point(entity: ClassEntity, side: str = "right") -> tuple[float, float]:
    """Get the mid point of one side of an entity box.

    Args:
        entity: The positioned entity
        side: 'left', 'right', 'top', or 'bottom'

    Returns:
        (x, y) coordinates of the connection point
    """
    cx, cy = entity.center
    if side == "right":
        return entity.x + entity.width, cy
    elif side == "left":
        return entity.x, cy
    elif side == "top":
        return cx, entity.y
    elif side == "bottom":
        return cx, entity.y + entity.height
    else:
        return cx, cy
