"""Tests for the pre-order AST visitor."""

import pytest
from xml_ast.ast import (
    XMLAstVisitor,
    XMLAttribute,
    XMLElement,
    XMLTextContent,
    accept,
    getASTfromString,
)

from conftest import make_span


class Recorder(XMLAstVisitor):
    """Records every visited node as (kind, label)."""

    def __init__(self):
        self.seen = []

    def visit_XMLDocument(self, node):
        self.seen.append(("document", None))

    def visit_XMLProlog(self, node):
        self.seen.append(("prolog", None))

    def visit_XMLElement(self, node):
        self.seen.append(("element", node.name))

    def visit_XMLAttribute(self, node):
        self.seen.append(("attribute", node.key))

    def visit_XMLTextContent(self, node):
        self.seen.append(("text", node.text))


class TestAccept:
    """Test accept() traversal order and dispatch."""

    def test_pre_order(self):
        doc = getASTfromString(
            '<?xml version="1.0"?><a x="1"><b y="2">t</b><c/>u</a>'
        )
        recorder = Recorder()
        accept(recorder, doc)
        assert recorder.seen == [
            ("document", None),
            ("element", "a"),
            ("attribute", "x"),
            ("element", "b"),
            ("attribute", "y"),
            ("text", "t"),
            ("element", "c"),
            ("text", "u"),
            ("prolog", None),
            ("attribute", "version"),
        ]

    def test_element_only_visitor(self):
        class Elements:
            def __init__(self):
                self.names = []

            def visit_XMLElement(self, node):
                self.names.append(node.name)

        doc = getASTfromString('<a k="v"><b>text<c/></b><d/></a>')
        visitor = Elements()
        accept(visitor, doc)
        assert visitor.names == ["a", "b", "c", "d"]

    def test_base_visitor_is_noop(self):
        doc = getASTfromString('<a k="v">text</a>')
        accept(XMLAstVisitor(), doc)

    def test_plain_object_visitor(self):
        accept(object(), getASTfromString("<a><b/></a>"))

    def test_non_callable_handler_ignored(self):
        class Odd:
            visit_XMLElement = "not a method"

        accept(Odd(), getASTfromString("<a/>"))

    def test_start_below_document(self):
        doc = getASTfromString("<a><b><c/></b><d/></a>")
        recorder = Recorder()
        accept(recorder, doc.root_element.sub_elements[0])
        assert recorder.seen == [("element", "b"), ("element", "c")]

    def test_handler_cannot_stop_descent(self):
        class Refusing(Recorder):
            def visit_XMLElement(self, node):
                super().visit_XMLElement(node)
                return False

        recorder = Refusing()
        accept(recorder, getASTfromString("<a><b/></a>"))
        assert recorder.seen == [("document", None), ("element", "a"), ("element", "b")]

    def test_prolog_visited_after_root_subtree(self):
        recorder = Recorder()
        accept(recorder, getASTfromString('<?xml version="1.0"?><a/>'))
        assert recorder.seen == [
            ("document", None),
            ("element", "a"),
            ("prolog", None),
            ("attribute", "version"),
        ]

    def test_leaf_nodes(self):
        recorder = Recorder()
        accept(recorder, XMLAttribute(position=make_span(), key="k", value="v"))
        accept(recorder, XMLTextContent(position=make_span(), text="hi"))
        assert recorder.seen == [("attribute", "k"), ("text", "hi")]

    def test_unknown_node_is_fatal(self):
        with pytest.raises(TypeError, match="Non exhaustive match"):
            accept(Recorder(), object())

    def test_unknown_child_is_fatal(self):
        element = XMLElement(position=make_span(), name="a")
        element.sub_elements.append("not a node")
        recorder = Recorder()
        with pytest.raises(TypeError, match="Non exhaustive match"):
            accept(recorder, element)
        assert recorder.seen == [("element", "a")]

    def test_deep_tree(self):
        depth = 3000
        root = XMLElement(position=make_span(), name="e0")
        current = root
        for i in range(1, depth):
            child = XMLElement(position=make_span(), name=f"e{i}")
            current.sub_elements.append(child)
            current = child

        class Counter(XMLAstVisitor):
            count = 0

            def visit_XMLElement(self, node):
                self.count += 1

        counter = Counter()
        accept(counter, root)
        assert counter.count == depth
