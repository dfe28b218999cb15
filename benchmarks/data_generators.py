"""
Test data generators for partial JSON parsing benchmarks.

Creates complete JSON documents of various shapes and splits them into the
short, word-fragment chunks a text-generation service streams:
- Small objects and large mixed arrays
- Deeply nested structures
- String-heavy content with escape sequences
"""

import json
import random
import string
from typing import Any

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_NULL_TYPE = 5
_ESCAPE_PROBABILITY = 0.3
_MAX_TOKEN_LENGTH = 6


def generate_test_data(data_type: str, seed: int = 0) -> str:
    """Generates a complete JSON document of the given type."""
    generators = {
        "small_object": _generate_small_object,
        "mixed_array": _generate_mixed_array,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type](random.Random(seed))


def generate_token_stream(data_type: str, seed: int = 0) -> list[str]:
    """
    Splits a generated document into chunks of 1 to 6 characters, the way
    tokens of a generated answer arrive.
    """
    text = generate_test_data(data_type, seed)
    rng = random.Random(seed)
    tokens = []
    i = 0
    while i < len(text):
        size = rng.randint(1, _MAX_TOKEN_LENGTH)
        tokens.append(text[i : i + size])
        i += size
    return tokens


def generate_truncated_data(data_type: str, fraction: float, seed: int = 0) -> str:
    """Returns the leading fraction of a generated document."""
    text = generate_test_data(data_type, seed)
    return text[: max(1, int(len(text) * fraction))]


def _generate_small_object(rng: random.Random) -> str:
    """Generates a small tool-call style object (< 1KB)."""
    data = {
        "name": "search_orders",
        "arguments": {
            "customer_id": rng.randint(1000, 9999),
            "query": _random_string(rng, 24),
            "limit": 20,
            "include_archived": False,
            "min_total": round(rng.uniform(1.0, 500.0), 2),
        },
        "reasoning": f"Looking up {_random_string(rng, 40)}",
    }
    return json.dumps(data)


def _generate_mixed_array(rng: random.Random) -> str:
    """Generates a large array with mixed data types."""
    array: list[Any] = []

    for i in range(200):
        choice = rng.randint(1, 6)
        if choice == _INT_TYPE:
            array.append(rng.randint(-1000, 1000))
        elif choice == _FLOAT_TYPE:
            array.append(round(rng.uniform(-100.0, 100.0), 3))
        elif choice == _STRING_TYPE:
            array.append(_random_string(rng, rng.randint(5, 30)))
        elif choice == _BOOL_TYPE:
            array.append(rng.choice([True, False]))
        elif choice == _NULL_TYPE:
            array.append(None)
        else:
            array.append(
                {
                    "index": i,
                    "value": _random_string(rng, 10),
                    "score": round(rng.uniform(0, 100), 2),
                }
            )

    return json.dumps(array)


def _generate_nested_structure(rng: random.Random) -> str:
    """Generates a deeply nested JSON structure."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(rng, 10)}

        return {
            "level": depth,
            "data": _random_string(rng, 15),
            "items": [create_nested_dict(depth - 1) for _ in range(2)],
            "nested": create_nested_dict(depth - 1),
        }

    return json.dumps(create_nested_dict(6))


def _generate_string_heavy(rng: random.Random) -> str:
    """Generates a document of long strings full of escape sequences."""

    def create_escaped_text() -> str:
        chars = []
        for _ in range(50):
            if rng.random() < _ESCAPE_PROBABILITY:
                chars.append(rng.choice(['"', "\\", "/", "\n", "\t", "é", "😀"]))
            else:
                chars.append(rng.choice(string.ascii_letters + " "))
        return "".join(chars)

    data = {
        "paragraphs": [create_escaped_text() for _ in range(40)],
        "sections": {
            f"section_{i}": {"title": create_escaped_text(), "body": create_escaped_text()}
            for i in range(10)
        },
    }
    # ensure_ascii turns non-ASCII text into \uXXXX escapes and surrogate pairs
    return json.dumps(data)


def _random_string(rng: random.Random, length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(rng.choices(string.ascii_letters, k=length))
