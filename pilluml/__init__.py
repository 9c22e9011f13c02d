"""pilluml - PlantUML-style class and sequence diagrams rendered to SVG.

Example usage:
    from pilluml import create_diagram, render_diagram

    svg = render_diagram('''
    @start_uml
    participant Client
    participant Server
    Client -> Server: Request
    Server --> Client: Response
    @end_uml
    ''')

    # Layer an external theme beneath the source's @start_style block
    create_diagram(source).with_style_file("theme.css").save("diagram")
"""

from .api import (
    DiagramBuilder,
    DiagramType,
    create_diagram,
    detect_diagram_type,
    render_diagram,
    render_diagram_styled,
    render_with_style_sheets,
)
from .layout import (
    LayoutConfig,
    layout_class_diagram,
    layout_sequence_diagram,
)
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
from .parser import (
    ClassDiagramParser,
    SequenceDiagramParser,
)
from .renderer import (
    ClassDiagramRenderer,
    SequenceDiagramRenderer,
)
from .style import (
    DEFAULT_STYLE,
    CssProperties,
    DiagramStyle,
)
from .svg import SvgBuilder

__version__ = "0.1.0"

__all__ = [
    # Rendering entry points
    "render_diagram",
    "render_diagram_styled",
    "render_with_style_sheets",
    "create_diagram",
    "detect_diagram_type",
    "DiagramBuilder",
    "DiagramType",
    # Class diagram models
    "ClassDiagram",
    "ClassEntity",
    "EntityKind",
    "Field",
    "Method",
    "Relationship",
    "RelationKind",
    "Visibility",
    # Sequence diagram models
    "SequenceDiagram",
    "Participant",
    "Message",
    "ArrowStyle",
    "Divider",
    "AltStart",
    "AltElse",
    "AltEnd",
    "Note",
    "NotePosition",
    # Pipeline stages
    "ClassDiagramParser",
    "SequenceDiagramParser",
    "LayoutConfig",
    "layout_class_diagram",
    "layout_sequence_diagram",
    "ClassDiagramRenderer",
    "SequenceDiagramRenderer",
    # Styling
    "DiagramStyle",
    "DEFAULT_STYLE",
    "CssProperties",
    "SvgBuilder",
    # Version
    "__version__",
]
