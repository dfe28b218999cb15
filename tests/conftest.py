"""
Pytest configuration and shared fixtures for partialjzon tests.

Provides immutable test data fixtures: complete documents, truncated
documents with their expected partial values, and the token feed of a
streaming session.
"""

from dataclasses import dataclass
from typing import Any

import pytest

from partialjzon import Allow


@dataclass(frozen=True)
class JsonTestCase:
    """
    Immutable container for JSON test case data.

    Holds test input, the Allow mask to parse it with, and the expected
    outcome for consistent test execution.
    """

    description: str
    input_data: str
    allow: Allow = Allow.ALL
    should_fail: bool = False
    expected_output: Any = None


COMPLETE_DOCUMENTS = [
    "null",
    "true",
    "false",
    "0",
    "-17",
    "3.14",
    "-0.5e-3",
    "1E+20",
    '""',
    '"hello"',
    '"quote \\" backslash \\\\ slash \\/ controls \\b\\f\\n\\r\\t"',
    '"hex \\u0123\\u4567\\u89AB\\uCDEF\\uabcd\\uef4A"',
    '"pair \\ud83d\\ude00 done"',
    '"a\\\\"',
    "[]",
    "{}",
    "[1, 2, 3]",
    '{"key": "value"}',
    '[[[[[[[[[[[[[[[[[[["Not too deep"]]]]]]]]]]]]]]]]]]]',
    """{
    "order": {
        "id": 12345,
        "customer": {"name": "Alice Johnson", "email": "alice@example.com"},
        "lines": [
            {"sku": "A-1", "qty": 2, "price": 9.99, "gift": false},
            {"sku": "B-7", "qty": 1, "price": 120.0, "gift": true}
        ],
        "notes": null,
        "tags": ["express", "fragile", ""],
        "totals": {"net": 139.98, "tax": 0.0e0, "discount": -5}
    },
    "": {" s p a c e d ": [1,2 , 3

,

4 , 5        ,          6           ,7        ]}
}""",
]


@pytest.fixture
def complete_documents() -> list[str]:
    """
    Provides well-formed JSON documents without non-standard constants.

    Suitable for comparison against strict reference decoders.
    """
    return list(COMPLETE_DOCUMENTS)


@pytest.fixture
def truncated_cases() -> list[JsonTestCase]:
    """
    Provides prefixes of JSON documents with the value each mask yields.

    Covers every fragment kind cut off at a position where it is still a
    valid prefix.
    """
    arr_obj = Allow.ARR | Allow.OBJ
    return [
        JsonTestCase("open string", '"', Allow.STR, expected_output=""),
        JsonTestCase("string body", '"stre', Allow.STR, expected_output="stre"),
        JsonTestCase(
            "dangling escape", '"abc\\', Allow.STR, expected_output="abc"
        ),
        JsonTestCase(
            "invalid escape tail", '" \\x12', Allow.STR, expected_output=" "
        ),
        JsonTestCase(
            "partial unicode escape",
            '"caf\\u00e9 \\u00',
            Allow.STR,
            expected_output="café ",
        ),
        JsonTestCase(
            "half surrogate pair", '"a\\ud83d', Allow.STR, expected_output="a"
        ),
        JsonTestCase(
            "escaped backslash at end", '"\\\\', Allow.STR, expected_output="\\"
        ),
        JsonTestCase(
            "escaped backslash closes string in array",
            '["a\\\\", 1',
            Allow.ARR,
            expected_output=["a\\", 1],
        ),
        JsonTestCase("array of string", '["', Allow.ARR, expected_output=[]),
        JsonTestCase(
            "array with partial string",
            '["',
            Allow.ARR | Allow.STR,
            expected_output=[""],
        ),
        JsonTestCase(
            "nested arrays",
            "[1, [2, [3",
            Allow.ARR,
            expected_output=[1, [2, [3]]],
        ),
        JsonTestCase(
            "inner array absorbs string",
            '[[1, "a',
            Allow.ARR,
            expected_output=[[1]],
        ),
        JsonTestCase("dangling comma", "[1, 2,", Allow.ARR, expected_output=[1, 2]),
        JsonTestCase("lone minus in array", "[1, -", Allow.ALL, expected_output=[1]),
        JsonTestCase(
            "placeholder object in array",
            '[1,{"a":',
            arr_obj,
            expected_output=[1, {"a": None}],
        ),
        JsonTestCase(
            "placeholder kept for disallowed object",
            '[1,{"a":',
            Allow.ARR,
            expected_output=[1, None],
        ),
        JsonTestCase(
            "object key with truncated value",
            '{"": "',
            Allow.OBJ,
            expected_output={"": None},
        ),
        JsonTestCase(
            "object with partial string",
            '{"": "',
            Allow.OBJ | Allow.STR,
            expected_output={"": ""},
        ),
        JsonTestCase(
            "object with partial literal",
            '{"a": 1, "b": tr',
            Allow.ALL,
            expected_output={"a": 1, "b": True},
        ),
        JsonTestCase(
            "nested object and array",
            '{"a": {"b": [1, 2',
            Allow.ALL,
            expected_output={"a": {"b": [1, 2]}},
        ),
        JsonTestCase(
            "inner object absorbs string",
            '{"a": {"b": "x',
            Allow.OBJ,
            expected_output={"a": {"b": None}},
        ),
        JsonTestCase(
            "number exponent sign", "-1.25e+", Allow.NUM, expected_output=-1.25
        ),
        JsonTestCase(
            "number exponent", "-1.25e", Allow.NUM, expected_output=-1.25
        ),
        JsonTestCase("number decimal point", "1.", Allow.NUM, expected_output=1),
        JsonTestCase("partial null", "n", Allow.NULL, expected_output=None),
        JsonTestCase("partial true", "t", Allow.BOOL, expected_output=True),
        JsonTestCase("partial false", "fal", Allow.BOOL, expected_output=False),
        JsonTestCase(
            "partial literal in array",
            "[tru",
            Allow.ARR | Allow.BOOL,
            expected_output=[True],
        ),
    ]


@pytest.fixture
def incomplete_cases() -> list[JsonTestCase]:
    """
    Provides valid prefixes whose unfinished kind is not in the mask.

    Each must raise IncompleteJSONError.
    """
    return [
        JsonTestCase("open string", '"', Allow.ALL - Allow.STR, True),
        JsonTestCase("open array", "[", Allow.STR, True),
        JsonTestCase("array with open string", '["', Allow.STR, True),
        JsonTestCase("array with string", '[""', Allow.STR, True),
        JsonTestCase("array with comma", '["",', Allow.STR, True),
        JsonTestCase("open object", "{", Allow.STR, True),
        JsonTestCase("open key", '{"', Allow.STR, True),
        JsonTestCase("key without colon", '{""', Allow.STR, True),
        JsonTestCase("key with colon", '{"":', Allow.STR, True),
        JsonTestCase("key with open value", '{"":"', Allow.STR, True),
        JsonTestCase("key with value", '{"":""', Allow.STR, True),
        JsonTestCase("partial key under ALL", '{"a": 1, "b', Allow.ALL, True),
        JsonTestCase("number exponent", "-1.25e", Allow.NONE, True),
        JsonTestCase("lone minus", "-", Allow.NUM, True),
        JsonTestCase("lone minus without num", "-", Allow.NONE, True),
    ]


@pytest.fixture
def malformed_cases() -> list[JsonTestCase]:
    """
    Provides text that can never become valid JSON.

    Each must raise MalformedJSONError whatever the mask allows.
    """
    return [
        JsonTestCase("empty", "", should_fail=True),
        JsonTestCase("whitespace only", " \n\t\r ", should_fail=True),
        JsonTestCase("unknown token", "x", should_fail=True),
        JsonTestCase("bad keyword", "tx", should_fail=True),
        JsonTestCase("bad token in array", "[1, x", should_fail=True),
        JsonTestCase("bad token in object", '{"a": @}', should_fail=True),
        JsonTestCase("mismatched close", '["mismatch"}', should_fail=True),
        JsonTestCase("extra data", '{"a": 1} x', should_fail=True),
        JsonTestCase("two values", "1 2", should_fail=True),
        JsonTestCase("second document", "[1] [2", should_fail=True),
        JsonTestCase("invalid escape", '"\\x15"', should_fail=True),
        JsonTestCase("raw tab in string", '"tab\there"', should_fail=True),
        JsonTestCase("single quotes", "['single quote']", should_fail=True),
        JsonTestCase("byte order mark", '\ufeff"bom"', should_fail=True),
    ]


@pytest.fixture
def demo_tokens() -> list[str]:
    """
    Provides the token feed of a streaming session, split mid-word the way
    text-generation services emit it.
    """
    return [
        "{",
        '"ti', 'tle"', ":", '"Str', "eam", "ing ", "de", 'mo"', ",",
        '"me', 'ta"', ":", "{",
        '"co', 'unt"', ":", "4", "2", ",",
        '"va', 'lid"', ":", "tr", "ue", ",",
        '"ra', 'tio"', ":", "0.", "618", ",",
        '"ta', 'gs"', ":", "[", '"py', 'thon"', ",", '"js', 'on"', ",", "null", "]", ",",
        '"ex', 't"', ":", "{",
        '"na', 'n"', ":", "Na", "N", ",",
        '"po', 'sInf"', ":", "Infi", "nity", ",",
        '"ne', 'gInf"', ":", "-Inf", "inity",
        "}",
        "}", ",",
        '"it', 'ems"', ":", "[",
        "{", '"i', 'd"', ":", "1", ",", '"na', 'me"', ":", '"al', 'pha"', "}", ",",
        "{", '"i', 'd"', ":", "2", ",", '"na', 'me"', ":", '"be', 'ta"', "}",
        "]",
        "}",
    ]
