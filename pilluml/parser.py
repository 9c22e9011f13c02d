"""Line-oriented parsers for class and sequence diagram sources.

Both parsers are best-effort: a line that is not understood is counted in
``dropped_lines`` and logged at DEBUG level, never raised.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from .models import (
    AltElse,
    AltEnd,
    AltStart,
    ArrowStyle,
    ClassDiagram,
    ClassEntity,
    Divider,
    EntityKind,
    Field,
    Message,
    Method,
    Note,
    NotePosition,
    Participant,
    Relationship,
    RelationKind,
    SequenceDiagram,
    Visibility,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

LOGGER = logging.getLogger(__name__)

BEGIN_MARKERS = ("@start_uml", "@startuml")
END_MARKERS = ("@end_uml", "@enduml")
STYLE_BEGIN = "@start_style"
STYLE_END = "@end_style"

# Header prefixes, "abstract class " before the bare "abstract "
_HEADER_PREFIXES = (
    ("interface ", EntityKind.INTERFACE),
    ("abstract class ", EntityKind.ABSTRACT),
    ("abstract ", EntityKind.ABSTRACT),
    ("enum ", EntityKind.ENUM),
    ("class ", EntityKind.CLASS),
)

# Most specific tokens first; the bare "--" must stay last
RELATION_TOKENS = (
    ("--|>", RelationKind.INHERITANCE),
    ("<|--", RelationKind.INHERITANCE),
    ("..|>", RelationKind.REALIZATION),
    ("<|..", RelationKind.REALIZATION),
    ("*--", RelationKind.COMPOSITION),
    ("--*", RelationKind.COMPOSITION),
    ("o--", RelationKind.AGGREGATION),
    ("--o", RelationKind.AGGREGATION),
    ("..>", RelationKind.DEPENDENCY),
    ("<..", RelationKind.DEPENDENCY),
    ("-->", RelationKind.DIRECTED_ASSOCIATION),
    ("<--", RelationKind.DIRECTED_ASSOCIATION),
    ("--", RelationKind.ASSOCIATION),
)

# Longest first
ARROW_TOKENS = (
    ("-->>", ArrowStyle.DASHED_OPEN),
    ("->>", ArrowStyle.SOLID_OPEN),
    ("-->", ArrowStyle.DASHED),
    ("->", ArrowStyle.SOLID),
)

_STATIC_MARKERS = ("{static}", "{classifier}")
_ABSTRACT_MARKER = "{abstract}"

_NOTE_PATTERN = re.compile(
    r"^note\s+(over|left\s+of|right\s+of)\s+([^:]+?)\s*(?::\s*(.*))?$"
)


def split_lines(source: str) -> list[str]:
    """Split on ``\\n`` only; a trailing ``\\r`` is dropped from each line."""
    return [line[:-1] if line.endswith("\r") else line for line in source.split("\n")]


def iter_source_lines(source: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line_number, stripped_line)`` outside the inline style block.

    A style block left open ends at the next begin marker.
    """
    in_style = False
    for lineno, raw in enumerate(split_lines(source), start=1):
        line = raw.strip()
        if line == STYLE_BEGIN:
            in_style = True
            continue
        if in_style:
            if line == STYLE_END:
                in_style = False
                continue
            if not line.startswith(BEGIN_MARKERS):
                continue
            in_style = False
        yield lineno, line


def iter_diagram_lines(source: str) -> Iterator[tuple[int, str]]:
    """Yield the meaningful lines between the begin and end markers.

    Blank lines, ``//`` comments and ``skinparam`` lines are skipped. A source
    without any begin marker is treated as one bare diagram body.
    """
    lines = list(iter_source_lines(source))
    in_diagram = not any(line.startswith(BEGIN_MARKERS) for _, line in lines)

    for lineno, line in lines:
        if line.startswith(BEGIN_MARKERS):
            in_diagram = True
            continue
        if line.startswith(END_MARKERS):
            break
        if not in_diagram:
            continue
        if not line or line.startswith("//") or line.startswith("skinparam"):
            continue
        yield lineno, line


def split_stereotype(text: str) -> tuple[str, str | None]:
    """Split ``Name <<label>>`` into ``("Name", "label")``."""
    start = text.find("<<")
    if start < 0:
        return text.strip(), None
    end = text.find(">>", start + 2)
    if end < 0:
        return text.strip(), None
    return text[:start].strip(), text[start + 2:end].strip()


def is_class_diagram(source: str) -> bool:
    """Guess whether a source describes a class diagram.

    The first line carrying a kind-specific keyword decides; sources with no
    such line are treated as sequence diagrams.
    """
    class_tokens = [token for token, _ in RELATION_TOKENS[:8]]

    for _, line in iter_source_lines(source):
        if line.startswith(tuple(prefix for prefix, _ in _HEADER_PREFIXES)):
            return True
        if any(token in line for token in class_tokens):
            return True
        if (
            line.startswith("participant ")
            or line.startswith("actor ")
            or ("->" in line and ":" in line and "--|>" not in line)
        ):
            return False
    return False


class ClassDiagramParser:
    """Parses class diagram sources.

    The only state is the entity whose ``{ ... }`` body is currently open.
    """

    def __init__(self) -> None:
        self._diagram = ClassDiagram()
        self._current: ClassEntity | None = None

    def parse(self, source: str) -> ClassDiagram:
        self._diagram = ClassDiagram()
        self._current = None

        for lineno, line in iter_diagram_lines(source):
            if not self._parse_line(line):
                self._diagram.dropped_lines += 1
                LOGGER.debug("Ignoring class diagram line %d: %r", lineno, line)

        return self._diagram

    def _parse_line(self, line: str) -> bool:
        if line == "}":
            self._current = None
            return True

        if self._current is not None:
            return self._parse_member(self._current, line)

        if self._parse_header(line):
            return True

        return self._parse_relationship(line)

    def _parse_header(self, line: str) -> bool:
        for prefix, kind in _HEADER_PREFIXES:
            if line.startswith(prefix):
                rest = line[len(prefix):].strip()
                break
        else:
            return False

        has_body = False
        if rest.endswith("{}"):
            rest = rest[:-2]
        elif rest.endswith("{"):
            rest = rest[:-1]
            has_body = True

        name, stereotype = split_stereotype(rest)
        if not name:
            return False

        # Redeclaration replaces the entity but keeps its first-seen slot
        entity = ClassEntity(name=name, kind=kind, stereotype=stereotype)
        self._diagram.entities[name] = entity
        if has_body:
            self._current = entity
        return True

    def _parse_member(self, entity: ClassEntity, line: str) -> bool:
        if line == "{":
            return True

        visibility = Visibility.from_symbol(line[0])
        rest = line[1:].strip() if visibility else line

        if "(" in rest:
            return self._parse_method(entity, visibility, rest)
        return self._parse_field(entity, visibility, rest)

    def _parse_field(
        self, entity: ClassEntity, visibility: Visibility | None, rest: str
    ) -> bool:
        is_static = any(marker in rest for marker in _STATIC_MARKERS)
        for marker in _STATIC_MARKERS:
            rest = rest.replace(marker, "")

        name, sep, type_ = rest.strip().partition(":")
        name = name.strip()
        if not name:
            return False

        entity.fields.append(
            Field(
                name=name,
                visibility=visibility,
                type=type_.strip() or None if sep else None,
                is_static=is_static,
            )
        )
        return True

    def _parse_method(
        self, entity: ClassEntity, visibility: Visibility | None, rest: str
    ) -> bool:
        is_static = any(marker in rest for marker in _STATIC_MARKERS)
        is_abstract = _ABSTRACT_MARKER in rest
        for marker in (*_STATIC_MARKERS, _ABSTRACT_MARKER):
            rest = rest.replace(marker, "")
        rest = rest.strip()

        open_pos = rest.find("(")
        close_pos = rest.find(")")
        if open_pos < 0 or close_pos < open_pos:
            return False

        _, sep, return_type = rest[close_pos + 1:].partition(":")
        entity.methods.append(
            Method(
                name=rest[:open_pos].strip(),
                visibility=visibility,
                params=rest[open_pos + 1:close_pos].strip(),
                return_type=return_type.strip() or None if sep else None,
                is_static=is_static,
                is_abstract=is_abstract,
            )
        )
        return True

    def _parse_relationship(self, line: str) -> bool:
        for token, kind in RELATION_TOKENS:
            pos = line.find(token)
            if pos < 0:
                continue

            left = line[:pos].strip()
            right, sep, label = line[pos + len(token):].partition(":")
            right = right.strip()
            if not left or not right:
                continue

            # Left-pointing tokens describe the same edge written backwards
            if token.startswith("<"):
                source, target = right, left
            else:
                source, target = left, right

            self._ensure_entity(source)
            self._ensure_entity(target)
            self._diagram.relationships.append(
                Relationship(
                    source=source,
                    target=target,
                    kind=kind,
                    label=label.strip() or None if sep else None,
                )
            )
            return True

        return False

    def _ensure_entity(self, name: str) -> None:
        if name not in self._diagram.entities:
            self._diagram.entities[name] = ClassEntity(name=name)


class SequenceDiagramParser:
    """Parses sequence diagram sources.

    Alt blocks are kept as flat markers in the element stream; matching them
    up is left to the renderer.
    """

    def __init__(self) -> None:
        self._participants: dict[str, Participant] = {}
        self._next_order = 0
        self._diagram = SequenceDiagram()

    def parse(self, source: str) -> SequenceDiagram:
        self._participants = {}
        self._next_order = 0
        self._diagram = SequenceDiagram()

        for lineno, line in iter_diagram_lines(source):
            if not self._parse_line(line):
                self._diagram.dropped_lines += 1
                LOGGER.debug("Ignoring sequence diagram line %d: %r", lineno, line)

        # sorted() is stable, so equal orders keep first-seen order
        self._diagram.participants = sorted(
            self._participants.values(), key=lambda p: p.order
        )
        return self._diagram

    def _parse_line(self, line: str) -> bool:
        elements = self._diagram.elements

        if line.startswith("participant "):
            return self._parse_participant(line[len("participant "):], is_actor=False)
        if line.startswith("actor "):
            return self._parse_participant(line[len("actor "):], is_actor=True)

        if line.startswith("...") and line.endswith("..."):
            elements.append(Divider(text=line.strip(".").strip()))
            return True

        if line == "alt" or line.startswith("alt "):
            elements.append(AltStart(condition=line[3:].strip()))
            return True
        if line == "else" or line.startswith("else "):
            elements.append(AltElse(condition=line[4:].strip() or None))
            return True
        if line == "end":
            elements.append(AltEnd())
            return True

        if line.startswith("note "):
            return self._parse_note(line)

        return self._parse_message(line)

    def _parse_participant(self, rest: str, is_actor: bool) -> bool:
        parts = rest.split()
        if not parts:
            return False

        name = parts[0]
        order = self._next_order
        if "order" in parts:
            idx = parts.index("order")
            try:
                order = int(parts[idx + 1])
            except (IndexError, ValueError):
                LOGGER.debug("Ignoring invalid order for participant %r", name)

        if name not in self._participants:
            self._participants[name] = Participant(
                name=name, order=order, is_actor=is_actor
            )
            self._next_order += 1
        return True

    def _parse_note(self, line: str) -> bool:
        match = _NOTE_PATTERN.match(line)
        if not match:
            return False

        where, name, text = match.groups()
        position = NotePosition(where.split()[0])
        self._ensure_participant(name)
        self._diagram.elements.append(
            Note(participant=name, text=(text or "").strip(), position=position)
        )
        return True

    def _parse_message(self, line: str) -> bool:
        for token, style in ARROW_TOKENS:
            pos = line.find(token)
            if pos < 0:
                continue

            source = line[:pos].strip()
            target, _, text = line[pos + len(token):].partition(":")
            target = target.strip()
            if not source or not target:
                return False

            self._ensure_participant(source)
            self._ensure_participant(target)
            self._diagram.elements.append(
                Message(source=source, target=target, text=text.strip(), style=style)
            )
            return True

        return False

    def _ensure_participant(self, name: str) -> None:
        if name not in self._participants:
            self._participants[name] = Participant(name=name, order=self._next_order)
            self._next_order += 1
