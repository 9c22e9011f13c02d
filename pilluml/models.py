"""Data models for pilluml diagrams."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ---------------------------------------------------------------------------
# Class diagrams
# ---------------------------------------------------------------------------


class Visibility(Enum):
    """Member visibility modifiers."""

    PUBLIC = "+"
    PRIVATE = "-"
    PROTECTED = "#"
    PACKAGE = "~"

    @classmethod
    def from_symbol(cls, symbol: str) -> Visibility | None:
        """Return the visibility for a leading symbol, or None."""
        for vis in cls:
            if vis.value == symbol:
                return vis
        return None


def _prefix(visibility: Visibility | None) -> str:
    return visibility.value if visibility else ""


@dataclass
class Field:
    """An attribute row in a class box."""

    name: str
    visibility: Visibility | None = None
    type: str | None = None
    is_static: bool = False

    @property
    def text(self) -> str:
        if self.type:
            return f"{_prefix(self.visibility)}{self.name}: {self.type}"
        return f"{_prefix(self.visibility)}{self.name}"


@dataclass
class Method:
    """An operation row in a class box."""

    name: str
    visibility: Visibility | None = None
    params: str = ""
    return_type: str | None = None
    is_static: bool = False
    is_abstract: bool = False

    @property
    def text(self) -> str:
        signature = f"{_prefix(self.visibility)}{self.name}({self.params})"
        if self.return_type:
            return f"{signature}: {self.return_type}"
        return signature


class EntityKind(Enum):
    """Kind of class-like declaration."""

    CLASS = "class"
    INTERFACE = "interface"
    ABSTRACT = "abstract-class"
    ENUM = "enum"


@dataclass
class ClassEntity:
    """A class, interface, abstract class or enum."""

    name: str
    kind: EntityKind = EntityKind.CLASS
    fields: list[Field] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    stereotype: str | None = None

    # Layout properties (set during layout)
    x: float = field(default=0, repr=False)
    y: float = field(default=0, repr=False)
    width: float = field(default=0, repr=False)
    height: float = field(default=0, repr=False)

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


class RelationKind(Enum):
    """Relationship kinds between entities."""

    INHERITANCE = "inheritance"
    REALIZATION = "realization"
    COMPOSITION = "composition"
    AGGREGATION = "aggregation"
    ASSOCIATION = "association"
    DEPENDENCY = "dependency"
    DIRECTED_ASSOCIATION = "directed-association"

    @property
    def is_hierarchy(self) -> bool:
        """True for "is-a" kinds, which are laid out and routed vertically."""
        return self in (RelationKind.INHERITANCE, RelationKind.REALIZATION)

    @property
    def is_ownership(self) -> bool:
        return self in (RelationKind.COMPOSITION, RelationKind.AGGREGATION)


@dataclass
class Relationship:
    """A connector between two entities, stored source -> target."""

    source: str
    target: str
    kind: RelationKind = RelationKind.ASSOCIATION
    label: str | None = None


@dataclass
class ClassDiagram:
    """A parsed class diagram.

    ``entities`` is keyed by name. Its insertion order is the first-seen order
    of each name and decides draw order between entities of the same layer.
    """

    entities: dict[str, ClassEntity] = field(default_factory=dict)
    relationships: list[Relationship] = field(default_factory=list)
    dropped_lines: int = 0

    # Canvas size (set during layout)
    width: float = field(default=0, repr=False)
    height: float = field(default=0, repr=False)

    def entity(self, name: str) -> ClassEntity | None:
        return self.entities.get(name)


# ---------------------------------------------------------------------------
# Sequence diagrams
# ---------------------------------------------------------------------------


class ArrowStyle(Enum):
    """Message arrow styles."""

    SOLID = "->"
    DASHED = "-->"
    SOLID_OPEN = "->>"
    DASHED_OPEN = "-->>"

    @property
    def is_dashed(self) -> bool:
        return self in (ArrowStyle.DASHED, ArrowStyle.DASHED_OPEN)

    @property
    def is_open(self) -> bool:
        return self in (ArrowStyle.SOLID_OPEN, ArrowStyle.DASHED_OPEN)


@dataclass
class Participant:
    """A participant or actor with its lane geometry."""

    name: str
    order: int = 0
    is_actor: bool = False

    # Layout properties (set during layout); x is the lane centre
    x: float = field(default=0, repr=False)
    width: float = field(default=0, repr=False)


@dataclass
class Message:
    """A message arrow between two participants."""

    source: str
    target: str
    text: str = ""
    style: ArrowStyle = ArrowStyle.SOLID

    @property
    def is_self(self) -> bool:
        return self.source == self.target


@dataclass
class Divider:
    """A ``...text...`` separator spanning the diagram."""

    text: str = ""


@dataclass
class AltStart:
    """Opens an ``alt`` block."""

    condition: str = ""


@dataclass
class AltElse:
    """An ``else`` branch of the innermost open ``alt`` block."""

    condition: str | None = None


@dataclass
class AltEnd:
    """Closes the innermost open ``alt`` block, if any."""


class NotePosition(Enum):
    """Where a note sits relative to its participant."""

    OVER = "over"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Note:
    """A note attached to a participant lane."""

    participant: str
    text: str = ""
    position: NotePosition = NotePosition.OVER


Element = Union[Message, Divider, AltStart, AltElse, AltEnd, Note]


@dataclass
class SequenceDiagram:
    """A parsed sequence diagram.

    ``participants`` is sorted by declared order. ``elements`` keeps document
    order, which is also the vertical order of the drawing.
    """

    participants: list[Participant] = field(default_factory=list)
    elements: list[Element] = field(default_factory=list)
    dropped_lines: int = 0

    # Canvas size (set during layout)
    width: float = field(default=0, repr=False)
    height: float = field(default=0, repr=False)

    def participant(self, name: str) -> Participant | None:
        for p in self.participants:
            if p.name == name:
                return p
        return None

    @property
    def messages(self) -> list[Message]:
        return [e for e in self.elements if isinstance(e, Message)]
