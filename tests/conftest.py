"""
Pytest configuration and shared fixtures for tson tests.

Provides immutable test data fixtures and common utilities for clean,
type-safe test organization.
"""

from dataclasses import dataclass
from typing import Any

import pytest

import tson


@dataclass(frozen=True)
class TsonTestCase:
    """
    Immutable container for TSON test case data.

    Holds test input and expected behavior for consistent test execution.
    """

    description: str
    input_data: str
    should_fail: bool = False
    expected_output: Any = None
    expected_kind: tson.ErrorKind | None = None


@pytest.fixture
def basic_tson_values() -> list[TsonTestCase]:
    """
    Provides basic TSON value test cases for fundamental parsing.

    Covers every sigil-introduced literal and the basic container structures.
    """
    return [
        TsonTestCase("undefined sentinel", "-", False, None),
        TsonTestCase("true boolean", "?true", False, True),
        TsonTestCase("false boolean", "?false", False, False),
        TsonTestCase("integer", "#42", False, 42),
        TsonTestCase("negative integer", "#-5", False, -5),
        TsonTestCase("double", "=3.14", False, 3.14),
        TsonTestCase("negative double", "=-0.5", False, -0.5),
        TsonTestCase("double without fraction", "=7", False, 7.0),
        TsonTestCase("empty string", '""', False, ""),
        TsonTestCase("simple string", '"hello"', False, "hello"),
        TsonTestCase("empty array", "[]", False, []),
        TsonTestCase("empty object", "{}", False, {}),
        TsonTestCase("simple array", "[#1, #2, #3]", False, [1, 2, 3]),
        TsonTestCase(
            "simple object", '{key"value"}', False, {"key": "value"}
        ),
        TsonTestCase("named null", "flag", False, {"flag": None}),
    ]


@pytest.fixture
def tson_fail_cases() -> list[TsonTestCase]:
    """
    Provides TSON documents that must fail parsing, with the expected kind.
    """
    kind = tson.ErrorKind
    fail_docs = [
        ("empty document", "", kind.UNEXPECTED_END_OF_INPUT),
        ("only a comment", "// nothing", kind.UNEXPECTED_END_OF_INPUT),
        ("bare digits", "42", kind.UNEXPECTED_CHARACTER),
        ("bare negative number", "-5", kind.UNEXPECTED_CHARACTER),
        ("colon separator", "{a:#1}", kind.EXPECTED_CLOSE_BRACE),
        ("quoted key", '{"a"#1}', kind.EXPECTED_PROPERTY_NAME),
        ("numeric key", "{1a#1}", kind.EXPECTED_PROPERTY_NAME),
        ("unclosed object", "{a#1", kind.EXPECTED_CLOSE_BRACE),
        ("unclosed array", "[#1", kind.EXPECTED_CLOSE_BRACKET),
        ("missing comma in array", "[#1 #2]", kind.EXPECTED_CLOSE_BRACKET),
        (
            "type without array",
            "<#>#1",
            kind.EXPECTED_ARRAY_OPEN_AFTER_TYPE_SPECIFIER,
        ),
        ("unclosed type", "<int", kind.EXPECTED_TYPE_SPECIFIER_CLOSE),
        ("unterminated string", '"abc', kind.UNTERMINATED_STRING),
        ("dangling escape", '"abc\\', kind.UNTERMINATED_STRING),
        ("truncated boolean", "?tru", kind.INVALID_BOOLEAN_LITERAL),
        ("capitalised boolean", "?True", kind.INVALID_BOOLEAN_LITERAL),
        ("sign-only integer", "#-", kind.INVALID_NUMBER),
        ("empty integer", "#", kind.INVALID_NUMBER),
        ("empty double", "=", kind.INVALID_NUMBER),
        ("dot-only double", "=-.", kind.INVALID_NUMBER),
        ("two values", "#1 #2", kind.UNEXPECTED_TRAILING_CHARACTERS),
        ("extra close", "[]]", kind.UNEXPECTED_TRAILING_CHARACTERS),
    ]

    return [
        TsonTestCase(
            description=description,
            input_data=doc,
            should_fail=True,
            expected_kind=expected_kind,
        )
        for description, doc, expected_kind in fail_docs
    ]


@pytest.fixture
def user_document() -> str:
    """Provides a realistic nested document with every value form."""
    return """
user{
    name"John",            // display name
    age#30,
    isActive?true,
    isAdmin?false,
    /* postal address */
    address{street"123 Main St", city"Anytown", zip"12345"},
    friends<#>[#10, #80 , #48],
    score=97.5,
    nickname
}
"""
