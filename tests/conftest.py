"""Pytest configuration and shared fixtures for XML AST tests."""

import pytest
from xml_ast import getXMLParser
from xml_ast.cst import CstNode, Token
from xml_ast.position import SourcePosition


@pytest.fixture
def parser():
    """Create a parser instance for testing."""
    return getXMLParser()


def parse_success(parser, code):
    """Helper function to parse code and assert success."""
    result = parser.parse(code)
    assert result is not None
    return result


def parse_failure(parser, code):
    """Helper function to parse code and assert failure."""
    with pytest.raises(Exception):
        parser.parse(code)


def make_span(start=0, end=0):
    """Single-line span covering offsets [start, end)."""
    return SourcePosition(
        start_offset=start, end_offset=end,
        start_line=1, end_line=1,
        start_column=start + 1, end_column=end + 1,
    )


def make_token(image, start_offset=0, token_type="", recovery=False):
    """Single-line token starting at ``start_offset``."""
    end_offset = start_offset + len(image)
    return Token(
        image=image,
        start_offset=start_offset,
        end_offset=end_offset,
        start_line=1,
        end_line=1,
        start_column=start_offset + 1,
        end_column=end_offset + 1,
        token_type=token_type,
        is_inserted_in_recovery=recovery,
    )


def make_cst(name, start=0, end=0, **children):
    """CST node whose children are given as keyword lists, e.g. Name=[token]."""
    return CstNode(
        name=name,
        location=make_span(start, end),
        children={key: list(value) for key, value in children.items()},
    )
