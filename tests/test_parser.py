"""Tests for the document parser."""

import pytest

from kdlkit.errors import KdlLexicalError, KdlParseError, KdlSyntaxError, ReservedKeywordError
from kdlkit.nodes import KdlBool, KdlNull, KdlNumber, KdlProperty, KdlSkippedEntry, KdlString, StringKind
from kdlkit.parser import KdlParser, parse


# ---------------------------------------------------------------------------
# nodes and entries
# ---------------------------------------------------------------------------

def test_empty_document():
    assert parse("").nodes == ()
    assert parse("\n  // only a comment\n/* and a block */\n").nodes == ()

def test_node_with_arguments_and_properties():
    node = parse('node 1 "two" key=#true other=#null').nodes[0]
    assert node.name.value == "node"
    assert node.arguments == (KdlNumber(raw="1"), KdlString(value="two"))
    assert node.property("key") == KdlBool(value=True)
    assert node.property("other") == KdlNull()

def test_quoted_node_name():
    node = parse('"my node" 1').nodes[0]
    assert node.name.value == "my node"
    assert node.name.kind == StringKind.QUOTED

def test_type_annotations():
    node = parse("(person)alice (u8)10 age=(i32)30").nodes[0]
    assert node.type_annotation == "person"
    assert node.argument(0).type_annotation == "u8"
    assert node.property("age").type_annotation == "i32"

def test_type_annotation_allows_inner_whitespace():
    node = parse('node ( "my type" )"x"').nodes[0]
    assert node.argument(0).type_annotation == "my type"

def test_semicolon_terminators():
    doc = parse("a 1; b 2;c")
    assert [n.name.value for n in doc.nodes] == ["a", "b", "c"]
    assert doc.nodes[0].terminated_by_semicolon
    assert not doc.nodes[2].terminated_by_semicolon

def test_children():
    doc = parse("parent {\n    child 1\n    child 2 {\n        grandchild\n    }\n}")
    parent = doc.nodes[0]
    assert [n.name.value for n in parent.nodes] == ["child", "child"]
    assert parent.nodes[1].nodes[0].name.value == "grandchild"

def test_children_on_one_line():
    parent = parse("parent { a; b }").nodes[0]
    assert [n.name.value for n in parent.nodes] == ["a", "b"]

def test_duplicate_siblings_are_kept_in_order():
    doc = parse("item 1\nitem 2\nitem 3")
    assert [n.argument(0).to_python() for n in doc.child_group("item")] == [1, 2, 3]

def test_line_continuation_joins_entries():
    node = parse("node 1 \\\n    2").nodes[0]
    assert node.arguments == (KdlNumber(raw="1"), KdlNumber(raw="2"))

def test_comment_ends_node():
    doc = parse("a 1 // trailing\nb")
    assert [n.name.value for n in doc.nodes] == ["a", "b"]


# ---------------------------------------------------------------------------
# comments and slashdash
# ---------------------------------------------------------------------------

def test_nested_block_comments_are_ignored():
    doc = parse("a /* outer /* inner */ still comment */ 1")
    assert doc.nodes[0].arguments == (KdlNumber(raw="1"),)

def test_slashdash_argument():
    node = parse("node 1 /- 2 3").nodes[0]
    assert node.arguments == (KdlNumber(raw="1"), KdlNumber(raw="3"))

def test_slashdash_property():
    node = parse("node /-a=1 b=2").nodes[0]
    assert node.property("a") is None
    assert node.property("b") == KdlNumber(raw="2")

def test_slashdash_node():
    doc = parse("/- skipped 1 {\n    child\n}\nkept")
    assert [n.name.value for n in doc.nodes] == ["kept"]

def test_slashdash_node_on_following_line():
    doc = parse("/-\nskipped\nkept")
    assert [n.name.value for n in doc.nodes] == ["kept"]

def test_slashdash_children():
    node = parse("node /- {\n    gone\n}").nodes[0]
    assert not node.has_children

def test_slashdash_children_before_real_children():
    node = parse("node /-{ gone } { kept }").nodes[0]
    assert [n.name.value for n in node.nodes] == ["kept"]

def test_elided_document_equals_plain_one():
    with_elisions = parse("/-a\nb 1 /-2 {\n    c\n    /-d\n}\n")
    plain = parse("b 1 {\n    c\n}\n")
    assert with_elisions == plain

def test_keep_skipped_entries():
    node = KdlParser("node 1 /- (u8)2 /-key=3 4", config={"keep_skipped_entries": True}).parse_document().nodes[0]
    skipped = [e.raw for e in node.entries if isinstance(e, KdlSkippedEntry)]
    assert skipped == ["(u8)2", "key=3"]
    assert node.arguments == (KdlNumber(raw="1"), KdlNumber(raw="4"))


# ---------------------------------------------------------------------------
# errors
# ---------------------------------------------------------------------------

def test_unclosed_children_block_reports_position():
    with pytest.raises(KdlSyntaxError) as exc:
        parse("a {\n  b 1\n")
    assert exc.value.line == 3
    assert "line 1" in exc.value.message

def test_stray_closing_brace():
    with pytest.raises(KdlSyntaxError) as exc:
        parse("a\n}")
    assert exc.value.line == 2
    assert exc.value.column == 1

def test_number_as_node_name():
    with pytest.raises(KdlSyntaxError) as exc:
        parse("1 2")
    assert "Node names must be strings" in exc.value.message

def test_keyword_as_node_name():
    with pytest.raises(KdlSyntaxError):
        parse("#true")

def test_reserved_bare_argument():
    with pytest.raises(ReservedKeywordError) as exc:
        parse("node true")
    assert exc.value.column == 6

def test_whitespace_before_equals():
    with pytest.raises(KdlSyntaxError):
        parse("node key =1")

def test_whitespace_after_equals():
    with pytest.raises(KdlSyntaxError):
        parse("node key= 1")

def test_annotated_property_key():
    with pytest.raises(KdlSyntaxError):
        parse("node (t)key=1")

def test_entries_need_separation():
    with pytest.raises(KdlSyntaxError):
        parse('node "a""b"')

def test_children_need_separation():
    with pytest.raises(KdlSyntaxError):
        parse("node{}")

def test_entries_after_children():
    with pytest.raises(KdlSyntaxError):
        parse("node { a } 1")

def test_two_children_blocks():
    with pytest.raises(KdlSyntaxError):
        parse("node { a } { b }")

def test_missing_value_after_slashdash():
    with pytest.raises(KdlSyntaxError) as exc:
        parse("node /-")
    assert "end of input" in exc.value.message

def test_unclosed_type_annotation():
    with pytest.raises(KdlSyntaxError):
        parse("(type node")

def test_lexical_errors_surface_through_parser():
    with pytest.raises(KdlLexicalError):
        parse('node "unterminated')

def test_first_error_in_source_order_wins():
    with pytest.raises(KdlParseError) as exc:
        parse("node {\n1 \"bad")
    assert isinstance(exc.value, KdlSyntaxError)
    assert exc.value.line == 2

def test_error_string_includes_position():
    with pytest.raises(KdlParseError) as exc:
        parse("a }")
    assert str(exc.value).endswith("at line 1, column 3")
    assert exc.value.offset == 2

def test_deep_nesting_is_a_syntax_error():
    with pytest.raises(KdlSyntaxError) as exc:
        parse("a {" * 2000 + "}" * 2000)
    assert exc.value.offset == 128 * 3 + 2
    assert "nested deeper than 128" in exc.value.message

def test_nesting_up_to_the_limit_parses():
    doc = parse("a {" * 128 + "}" * 128)
    assert doc.nodes[0].has_children
    with pytest.raises(KdlSyntaxError):
        KdlParser("a {" * 5 + "}" * 5, config={"max_depth": 4}).parse_document()


def test_property_value_can_be_any_value():
    node = parse('node a="x" b=0x1 c=(t)#false').nodes[0]
    assert isinstance(node.entries[1], KdlProperty)
    assert node.property("b").to_python() == 1
    assert node.property("c") == KdlBool(value=False, type_annotation="t")
