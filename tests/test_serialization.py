"""Tests for AST JSON and YAML serialization."""

import json

import pytest
from xml_ast.ast import (
    MISSING,
    XMLAttribute,
    XMLDocument,
    XMLElement,
    XMLNamespace,
    XMLTextContent,
    XMLToken,
    ast_from_dict,
    ast_from_json,
    ast_from_yaml,
    ast_to_dict,
    ast_to_json,
    ast_to_yaml,
    get_ast_children,
    getASTfromString,
)
from xml_ast.position import SourcePosition

from conftest import make_span

SAMPLE = (
    '<?xml version="1.0"?>\n'
    '<a:root xmlns:a="urn:a" empty="">\n'
    '  <child>text</child>\n'
    '</a:root>'
)


def _assert_parents(node):
    for child in get_ast_children(node):
        assert child.parent is node
        _assert_parents(child)


class TestAstToDict:
    """Tests for ast_to_dict function."""

    def test_none_input(self):
        assert ast_to_dict(None) is None

    def test_single_node(self):
        node = XMLTextContent(position=make_span(0, 2), text="hi")
        result = ast_to_dict(node)
        assert result["_type"] == "XMLTextContent"
        assert result["text"] == "hi"
        assert result["_position"]["start_offset"] == 0
        assert result["_position"]["end_offset"] == 2
        assert "parent" not in result

    def test_without_position(self):
        node = XMLTextContent(position=make_span(), text="hi")
        result = ast_to_dict(node, include_position=False)
        assert "_position" not in result

    def test_missing_values(self):
        node = XMLAttribute(position=make_span(), key="k", value=MISSING)
        result = ast_to_dict(node)
        assert result["value"] == {"_missing": True}
        assert result["syntax"]["key"] == {"_missing": True}

    def test_document(self):
        result = ast_to_dict(getASTfromString(SAMPLE))
        assert result["_type"] == "XMLDocument"
        root = result["root_element"]
        assert root["name"] == "root"
        assert root["ns"] == "a"
        assert root["namespaces"] == [{"_type": "XMLNamespace", "prefix": "a", "uri": "urn:a"}]
        assert root["syntax"]["open_name"]["text"] == "a:root"
        assert root["syntax"]["open_body"]["_type"] == "SourcePosition"
        assert root["attributes"][1]["value"] == ""

    def test_unsupported_value(self):
        node = XMLTextContent(position=make_span(), text=object())
        with pytest.raises(TypeError):
            ast_to_dict(node)


class TestRoundTrip:
    """Tests for serializing and restoring ASTs."""

    def test_json_round_trip(self):
        doc = getASTfromString(SAMPLE)
        restored = ast_from_json(ast_to_json(doc))
        assert isinstance(restored, XMLDocument)
        assert restored == doc
        _assert_parents(restored)

    def test_missing_round_trip(self):
        doc = XMLDocument(position=make_span())
        restored = ast_from_dict(json.loads(ast_to_json(doc, indent=None)))
        assert restored.root_element is MISSING
        assert restored.prolog is None

    def test_empty_string_stays_distinct(self):
        attr = XMLAttribute(position=make_span(), key="k", value="")
        restored = ast_from_json(ast_to_json(attr))
        assert restored.value == ""
        assert restored.value is not MISSING

    def test_records_restored(self):
        root = ast_from_json(ast_to_json(getASTfromString(SAMPLE))).root_element
        assert isinstance(root.syntax.open_name, XMLToken)
        assert isinstance(root.syntax.open_body, SourcePosition)
        assert root.namespaces == [XMLNamespace("a", "urn:a")]
        assert isinstance(root.sub_elements[0], XMLElement)

    def test_yaml_round_trip(self):
        doc = getASTfromString(SAMPLE)
        yaml_str = ast_to_yaml(doc)
        assert "XMLDocument" in yaml_str
        restored = ast_from_yaml(yaml_str)
        assert restored == doc
        _assert_parents(restored)

    def test_without_position_uses_default(self):
        restored = ast_from_dict(ast_to_dict(getASTfromString("<a/>"), include_position=False))
        assert restored.root_element.position == SourcePosition(0, 0, 1, 1, 1, 1)
        assert restored.root_element.name == "a"

    def test_none(self):
        assert ast_from_dict(None) is None
        assert ast_from_json("null") is None


class TestDeserializationErrors:
    """Tests for malformed input."""

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown node type"):
            ast_from_dict({"_type": "XMLComment"})

    def test_missing_type(self):
        with pytest.raises(ValueError, match="_type"):
            ast_from_dict({"text": "hi"})

    def test_unsupported_value(self):
        with pytest.raises(TypeError):
            ast_from_dict({"_type": "XMLTextContent", "text": {"nested": "dict"}})
