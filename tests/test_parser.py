"""Tests for pilluml/parser.py: line scanning, both parsers and the detector."""
from __future__ import annotations

import pytest

from pilluml.models import (
    AltElse,
    AltEnd,
    AltStart,
    ArrowStyle,
    Divider,
    EntityKind,
    Message,
    Note,
    NotePosition,
    RelationKind,
    Visibility,
)
from pilluml.parser import (
    ClassDiagramParser,
    SequenceDiagramParser,
    is_class_diagram,
    iter_diagram_lines,
    split_stereotype,
)


def parse_class(body: str):
    return ClassDiagramParser().parse(f"@start_uml\n{body}\n@end_uml")


def parse_sequence(body: str):
    return SequenceDiagramParser().parse(f"@start_uml\n{body}\n@end_uml")


# ─────────────────────────────────────────────────────────
# Line scanning
# ─────────────────────────────────────────────────────────


class TestIterDiagramLines:
    def test_lines_outside_markers_ignored(self):
        source = "junk\n@start_uml\nclass A\n@end_uml\nclass B"
        assert [line for _, line in iter_diagram_lines(source)] == ["class A"]

    def test_plantuml_marker_spelling(self):
        source = "@startuml\nA -> B\n@enduml\nC -> D"
        assert [line for _, line in iter_diagram_lines(source)] == ["A -> B"]

    def test_bare_source_without_markers(self):
        lines = [line for _, line in iter_diagram_lines("participant A\nA -> B: ping")]
        assert lines == ["participant A", "A -> B: ping"]

    def test_comments_blank_and_skinparam_skipped(self):
        source = "@start_uml\n\n// note\nskinparam monochrome true\n  A -> B  \n@end_uml"
        assert [line for _, line in iter_diagram_lines(source)] == ["A -> B"]

    def test_style_block_skipped(self):
        source = (
            "@start_style\n.class { --rx: 4; }\n@end_style\n"
            "@start_uml\nclass A\n@end_uml"
        )
        assert [line for _, line in iter_diagram_lines(source)] == ["class A"]

    def test_unclosed_style_block_ends_at_begin_marker(self):
        source = "@start_style\n.class { --rx: 9; }\n@start_uml\nparticipant A\nA -> B: ping\n@end_uml"
        assert [line for _, line in iter_diagram_lines(source)] == ["participant A", "A -> B: ping"]

    def test_unclosed_style_block_still_parses(self):
        diagram = SequenceDiagramParser().parse(
            "@start_style\n.class { --rx: 9; }\n@start_uml\nparticipant A\nA -> B: ping\n@end_uml"
        )
        assert [p.name for p in diagram.participants] == ["A", "B"]
        assert len(diagram.messages) == 1

    @pytest.mark.parametrize("text", ["a\u2028b", "a\x0cb", "a\x85b", "a\x1eb"])
    def test_splits_on_newline_only(self, text):
        msg = parse_sequence(f"A -> B: {text}").elements[0]
        assert msg.text == text

    def test_crlf_line_endings(self):
        source = "@start_uml\r\nA -> B: hi\r\n@end_uml\r\n"
        assert [line for _, line in iter_diagram_lines(source)] == ["A -> B: hi"]

    def test_line_numbers_are_source_positions(self):
        numbers = [n for n, _ in iter_diagram_lines("@start_uml\n\nclass A\n@end_uml")]
        assert numbers == [3]


class TestSplitStereotype:
    def test_inline_stereotype(self):
        assert split_stereotype("Foo<<svc>>") == ("Foo", "svc")

    def test_spaced_stereotype(self):
        assert split_stereotype("Foo << entity >>") == ("Foo", "entity")

    def test_no_stereotype(self):
        assert split_stereotype(" Foo ") == ("Foo", None)

    def test_unterminated_stereotype_kept_in_name(self):
        assert split_stereotype("Foo<<svc") == ("Foo<<svc", None)


# ─────────────────────────────────────────────────────────
# Class diagram parser
# ─────────────────────────────────────────────────────────


class TestClassHeaders:
    def test_stereotype_header(self):
        diagram = parse_class("class Foo<<svc>> {\n}")
        entity = diagram.entity("Foo")
        assert entity is not None
        assert entity.stereotype == "svc"
        assert list(diagram.entities) == ["Foo"]

    @pytest.mark.parametrize("line,kind", [
        ("class A", EntityKind.CLASS),
        ("interface A", EntityKind.INTERFACE),
        ("abstract class A", EntityKind.ABSTRACT),
        ("abstract A", EntityKind.ABSTRACT),
        ("enum A", EntityKind.ENUM),
    ])
    def test_kinds(self, line, kind):
        assert parse_class(line).entity("A").kind == kind

    def test_empty_braces_do_not_open_body(self):
        diagram = parse_class("class Foo {}\n+ x: int")
        assert diagram.entity("Foo").fields == []
        assert diagram.dropped_lines == 1

    def test_enum_constants_are_fields(self):
        diagram = parse_class("enum Color {\nRED\nGREEN\n}")
        assert [f.name for f in diagram.entity("Color").fields] == ["RED", "GREEN"]

    def test_redeclaration_keeps_first_seen_slot(self):
        diagram = parse_class("A --> B\nclass B {\n+ x\n}\nclass C")
        assert list(diagram.entities) == ["A", "B", "C"]
        assert [f.name for f in diagram.entity("B").fields] == ["x"]

    def test_last_declaration_wins(self):
        diagram = parse_class("class A {\n+ x\n}\ninterface A")
        assert diagram.entity("A").kind == EntityKind.INTERFACE
        assert diagram.entity("A").fields == []


class TestClassMembers:
    @pytest.fixture()
    def entity(self):
        diagram = parse_class(
            "abstract class Shape {\n"
            "- x: i32\n"
            "+ {static} count: int\n"
            "name\n"
            "+ bar(): void\n"
            "# {abstract} area(): double\n"
            "~ helper(a: int, b: int)\n"
            "{classifier} create()\n"
            "broken(\n"
            "}"
        )
        return diagram.entity("Shape")

    def test_field_count(self, entity):
        assert len(entity.fields) == 3

    def test_private_typed_field(self, entity):
        f = entity.fields[0]
        assert (f.visibility, f.name, f.type, f.is_static) == (Visibility.PRIVATE, "x", "i32", False)

    def test_static_field(self, entity):
        f = entity.fields[1]
        assert f.visibility == Visibility.PUBLIC
        assert f.name == "count"
        assert f.is_static

    def test_untyped_field(self, entity):
        f = entity.fields[2]
        assert f.visibility is None
        assert f.type is None
        assert f.text == "name"

    def test_method_count_drops_unclosed(self, entity):
        assert [m.name for m in entity.methods] == ["bar", "area", "helper", "create"]

    def test_method_return_type(self, entity):
        m = entity.methods[0]
        assert m.return_type == "void"
        assert m.text == "+bar(): void"

    def test_abstract_method(self, entity):
        m = entity.methods[1]
        assert m.visibility == Visibility.PROTECTED
        assert m.is_abstract
        assert not m.is_static

    def test_params_kept_raw(self, entity):
        m = entity.methods[2]
        assert m.params == "a: int, b: int"
        assert m.return_type is None
        assert m.visibility == Visibility.PACKAGE

    def test_classifier_is_static(self, entity):
        assert entity.methods[3].is_static

    def test_closing_brace_ends_body(self):
        diagram = parse_class("class A {\n+ x\n}\nA --> B")
        assert len(diagram.entity("A").fields) == 1
        assert len(diagram.relationships) == 1


class TestRelationships:
    @pytest.mark.parametrize("line,source,target,kind", [
        ("A --|> B", "A", "B", RelationKind.INHERITANCE),
        ("B <|-- A", "A", "B", RelationKind.INHERITANCE),
        ("A ..|> B", "A", "B", RelationKind.REALIZATION),
        ("B <|.. A", "A", "B", RelationKind.REALIZATION),
        ("A *-- B", "A", "B", RelationKind.COMPOSITION),
        ("A --* B", "A", "B", RelationKind.COMPOSITION),
        ("A o-- B", "A", "B", RelationKind.AGGREGATION),
        ("A --o B", "A", "B", RelationKind.AGGREGATION),
        ("A ..> B", "A", "B", RelationKind.DEPENDENCY),
        ("B <.. A", "A", "B", RelationKind.DEPENDENCY),
        ("A --> B", "A", "B", RelationKind.DIRECTED_ASSOCIATION),
        ("B <-- A", "A", "B", RelationKind.DIRECTED_ASSOCIATION),
        ("A -- B", "A", "B", RelationKind.ASSOCIATION),
    ])
    def test_tokens_and_direction(self, line, source, target, kind):
        rel = parse_class(line).relationships[0]
        assert (rel.source, rel.target, rel.kind) == (source, target, kind)

    def test_label(self):
        rel = parse_class("Order --> Customer : placed by").relationships[0]
        assert rel.target == "Customer"
        assert rel.label == "placed by"

    def test_auto_creates_endpoints(self):
        diagram = parse_class("A --|> B")
        assert list(diagram.entities) == ["A", "B"]
        for entity in diagram.entities.values():
            assert entity.kind == EntityKind.CLASS
            assert entity.fields == []
            assert entity.methods == []

    def test_missing_operand_is_dropped(self):
        diagram = parse_class("--|> B")
        assert diagram.relationships == []
        assert diagram.entities == {}
        assert diagram.dropped_lines == 1

    def test_relationships_keep_source_order(self):
        diagram = parse_class("C --> D\nA --> B")
        assert [r.source for r in diagram.relationships] == ["C", "A"]


class TestClassScenario:
    def test_animal_dog(self):
        diagram = ClassDiagramParser().parse(
            "class Animal {\n+ name: string\n}\nclass Dog\nDog --|> Animal"
        )
        assert len(diagram.entities) == 2
        assert diagram.entity("Dog").fields == []

        (name,) = diagram.entity("Animal").fields
        assert (name.visibility, name.name, name.type) == (Visibility.PUBLIC, "name", "string")

        (rel,) = diagram.relationships
        assert (rel.source, rel.target, rel.kind) == ("Dog", "Animal", RelationKind.INHERITANCE)


# ─────────────────────────────────────────────────────────
# Sequence diagram parser
# ─────────────────────────────────────────────────────────


class TestSequenceParser:
    def test_ping_scenario(self):
        diagram = SequenceDiagramParser().parse("participant A\nparticipant B\nA -> B: ping")
        assert [p.name for p in diagram.participants] == ["A", "B"]
        (msg,) = diagram.elements
        assert isinstance(msg, Message)
        assert msg.style == ArrowStyle.SOLID
        assert msg.text == "ping"

    @pytest.mark.parametrize("arrow,style", [
        ("->", ArrowStyle.SOLID),
        ("-->", ArrowStyle.DASHED),
        ("->>", ArrowStyle.SOLID_OPEN),
        ("-->>", ArrowStyle.DASHED_OPEN),
    ])
    def test_arrow_styles(self, arrow, style):
        msg = parse_sequence(f"A {arrow} B: x").elements[0]
        assert (msg.source, msg.target, msg.style) == ("A", "B", style)

    def test_message_without_text(self):
        msg = parse_sequence("A -> B").elements[0]
        assert msg.text == ""

    def test_self_message(self):
        msg = parse_sequence("A -> A: self").elements[0]
        assert msg.is_self

    def test_auto_created_participants_get_next_order(self):
        diagram = parse_sequence("participant A\nB -> C: hi")
        assert [(p.name, p.order) for p in diagram.participants] == [("A", 0), ("B", 1), ("C", 2)]

    def test_explicit_order(self):
        diagram = parse_sequence("participant B\nparticipant A order -1")
        assert [p.name for p in diagram.participants] == ["A", "B"]

    def test_invalid_order_ignored(self):
        diagram = parse_sequence("participant A order x")
        assert diagram.participants[0].order == 0

    def test_equal_orders_keep_first_seen(self):
        diagram = parse_sequence("participant A order 1\nparticipant B order 1\nparticipant C order 0")
        assert [p.name for p in diagram.participants] == ["C", "A", "B"]

    def test_redeclaration_ignored(self):
        diagram = parse_sequence("A -> B\nparticipant A order 9")
        assert diagram.participant("A").order == 0

    def test_actor(self):
        diagram = parse_sequence("actor User\nparticipant Api")
        assert diagram.participant("User").is_actor
        assert not diagram.participant("Api").is_actor

    def test_divider(self):
        assert parse_sequence("... later ...").elements == [Divider(text="later")]

    def test_alt_block_markers(self):
        diagram = parse_sequence(
            "alt ok\nA -> B: x\nelse failure\nA -> B: y\nelse\nend"
        )
        kinds = [type(e) for e in diagram.elements]
        assert kinds == [AltStart, Message, AltElse, Message, AltElse, AltEnd]
        assert diagram.elements[0].condition == "ok"
        assert diagram.elements[2].condition == "failure"
        assert diagram.elements[4].condition is None

    def test_stray_end_kept_without_entities(self):
        diagram = parse_sequence("end")
        assert diagram.elements == [AltEnd()]
        assert diagram.participants == []

    def test_notes(self):
        diagram = parse_sequence(
            "participant A\nnote over A: hello\nnote left of B: x\nnote right of C"
        )
        assert diagram.elements == [
            Note(participant="A", text="hello", position=NotePosition.OVER),
            Note(participant="B", text="x", position=NotePosition.LEFT),
            Note(participant="C", text="", position=NotePosition.RIGHT),
        ]
        assert [p.name for p in diagram.participants] == ["A", "B", "C"]

    def test_unrecognized_lines_counted(self):
        diagram = parse_sequence("A ->\nhello there\nA -> B: ok")
        assert diagram.dropped_lines == 2
        assert len(diagram.messages) == 1


# ─────────────────────────────────────────────────────────
# Diagram type detection
# ─────────────────────────────────────────────────────────


class TestIsClassDiagram:
    @pytest.mark.parametrize("source", [
        "class Foo {}",
        "@start_uml\ninterface Runnable\n@end_uml",
        "A --|> B",
        "Car *-- Wheel",
        "Team o-- Player",
    ])
    def test_class_sources(self, source):
        assert is_class_diagram(source)

    @pytest.mark.parametrize("source", [
        "participant A\nA -> B: msg",
        "actor User",
        "A -> B: hello",
        "",
    ])
    def test_sequence_sources(self, source):
        assert not is_class_diagram(source)

    def test_style_block_ignored(self):
        source = "@start_style\n.class { --opacity: 1; }\n@end_style\nA -> B: hi"
        assert not is_class_diagram(source)

    def test_first_deciding_line_wins(self):
        assert not is_class_diagram("participant A\nclass B")
