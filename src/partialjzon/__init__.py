"""
Tolerant JSON parsing for documents that are still arriving.

Parses JSON text that may be cut off mid-token, returning a best-effort value
tree for the fragment kinds enabled in an Allow mask, and wraps the parser in
an accumulator that republishes the latest good snapshot as chunks stream in.
"""

import logging
import math
import os
import threading
import time
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from typing import IO
from typing import Any

from ._allow import Allow

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# Type aliases for domain concepts - recursive definition
JsonValue = (
    str | int | float | bool | None | dict[str, "JsonValue"] | list["JsonValue"]
)
Position = int

# Numeric hooks may return custom types
JsonValueOrTransformed = JsonValue | Any
ParseFloatHook = Callable[[str], Any] | None
ParseIntHook = Callable[[str], Any] | None

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "PARTIALJZON_PROFILE" in os.environ

_WHITESPACE = " \t\n\r"
_DIGITS = "0123456789"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_NUMBER_CHARS = frozenset("-+.eE0123456789")
_NUMBER_TAIL_CHARS = ".eE+-"

_ESCAPE_MAP = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# (keyword, value, governing flag)
_KEYWORDS: tuple[tuple[str, JsonValue, Allow], ...] = (
    ("null", None, Allow.NULL),
    ("true", True, Allow.BOOL),
    ("false", False, Allow.BOOL),
    ("Infinity", math.inf, Allow.INFINITY),
    ("NaN", math.nan, Allow.NAN),
)
_SIGNED_KEYWORDS: tuple[tuple[str, JsonValue, Allow], ...] = (
    ("-Infinity", -math.inf, Allow.NEG_INFINITY),
    ("-NaN", math.nan, Allow.NAN),
)


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during parsing."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        """Records a function call with timing and character processing info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, chars_to_process: int = 0):
            self.func_name = func_name
            self.chars = chars_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.chars)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str, chars: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class JSONDecodeError(ValueError):
    """
    Base class for parse failures, carrying position and context.

    Holds the message, the document being parsed and the offending position,
    with line and column numbers derived from them.
    """

    def __init__(self, msg: str, doc: str = "", pos: Position = 0) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos

        self.lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        self.colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    @property
    def reason(self) -> str:
        """Human-readable cause without the position suffix."""
        return self.msg

    def __reduce__(self) -> tuple[Any, ...]:
        return type(self), (self.msg, self.doc, self.pos)


class IncompleteJSONError(JSONDecodeError):
    """
    The text is a valid prefix of some JSON document but ends inside a
    construct whose kind is not allowed to be returned unfinished.

    Supplying more text may resolve it.
    """


class MalformedJSONError(JSONDecodeError):
    """The text can never become valid JSON, whatever follows it."""


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures a single parse with immutable settings.

    The Allow mask selects which fragment kinds may come back unfinished;
    the numeric hooks convert validated number tokens.
    """

    allow: Allow = Allow.ALL
    parse_float: ParseFloatHook = None
    parse_int: ParseIntHook = None

    def __post_init__(self) -> None:
        if not isinstance(self.allow, Allow):
            raise TypeError("allow must be an Allow mask")
        if self.parse_float is not None and not callable(self.parse_float):
            raise TypeError("parse_float must be callable")
        if self.parse_int is not None and not callable(self.parse_int):
            raise TypeError("parse_int must be callable")


@dataclass(frozen=True)
class StreamConfig:
    """
    Configures a PartialJSONStream.

    halt_on_malformed stops re-parsing once the buffer is known to be
    malformed, until the stream is cleared.
    """

    allow: Allow = Allow.ALL
    halt_on_malformed: bool = False
    parse_float: ParseFloatHook = None
    parse_int: ParseIntHook = None

    def __post_init__(self) -> None:
        if not isinstance(self.halt_on_malformed, bool):
            raise TypeError("halt_on_malformed must be a boolean")
        # Validates the parse-related fields
        self.parse_config()

    def parse_config(self) -> ParseConfig:
        """Returns the per-parse settings carried by this stream config."""
        return ParseConfig(
            allow=self.allow,
            parse_float=self.parse_float,
            parse_int=self.parse_int,
        )


def _read_hex_escape(inner: str, i: int, doc: str, offset: Position) -> int:
    """Reads the four hex digits of the \\uXXXX escape starting at inner[i]."""
    hex_digits = inner[i + 2 : i + 6]
    if len(hex_digits) < 4:
        raise MalformedJSONError(
            "Incomplete unicode escape sequence", doc, offset + i
        )
    if not all(c in _HEX_DIGITS for c in hex_digits):
        raise MalformedJSONError(
            f"Invalid unicode escape sequence: \\u{hex_digits}",
            doc,
            offset + i,
        )
    return int(hex_digits, 16)


def _process_escape_sequence(
    inner: str, i: int, doc: str, offset: Position
) -> tuple[str, int]:
    """Process a single escape sequence and return the character and new position."""
    if i + 1 >= len(inner):
        raise MalformedJSONError(
            "Unterminated escape sequence", doc, offset + i
        )

    next_char = inner[i + 1]
    if next_char in _ESCAPE_MAP:
        return _ESCAPE_MAP[next_char], i + 2
    if next_char != "u":
        raise MalformedJSONError(
            f"Invalid escape sequence: \\{next_char}", doc, offset + i
        )

    code_point = _read_hex_escape(inner, i, doc, offset)
    if 0xD800 <= code_point <= 0xDBFF and inner[i + 6 : i + 8] == "\\u":
        low = _read_hex_escape(inner, i + 6, doc, offset)
        if 0xDC00 <= low <= 0xDFFF:
            pair = 0x10000 + ((code_point - 0xD800) << 10) + (low - 0xDC00)
            return chr(pair), i + 12
    return chr(code_point), i + 6


def _decode_string(inner: str, doc: str = "", offset: Position = 0) -> str:
    """
    Decodes the content between the quotes of a JSON string literal.

    Error positions are reported as offset plus the index into inner, so a
    failure at index i means inner[:i] decodes cleanly.
    """
    with ProfileContext("decode_string", len(inner)):
        result = []
        i = 0
        length = len(inner)
        while i < length:
            char = inner[i]
            if char == "\\":
                decoded, i = _process_escape_sequence(inner, i, doc, offset)
                result.append(decoded)
            elif char < " ":
                raise MalformedJSONError(
                    "Invalid control character in string", doc, offset + i
                )
            else:
                result.append(char)
                i += 1

        return "".join(result)


def _decode_partial_string(raw: str) -> str:
    """
    Decodes the longest prefix of an unterminated string's raw content.

    Trailing characters are dropped until the rest decodes, so a dangling
    escape sequence (or a high surrogate waiting for its pair) is left out.
    """
    end = len(raw)
    while end > 0:
        try:
            decoded = _decode_string(raw[:end])
        except MalformedJSONError as e:
            # raw[:e.pos] is the longest prefix that can still decode
            end = min(end - 1, e.pos)
            continue
        if decoded and "\ud800" <= decoded[-1] <= "\udbff":
            end -= 1
            continue
        return decoded
    return ""


def _scan_digits(token: str, i: int) -> int:
    while i < len(token) and token[i] in _DIGITS:
        i += 1
    return i


def _is_json_number(token: str) -> bool:
    """Checks token against the strict JSON number grammar."""
    i = 1 if token.startswith("-") else 0

    # Integer part: a lone zero or digits without a leading zero
    if token[i : i + 1] == "0":
        i += 1
    else:
        end = _scan_digits(token, i)
        if end == i:
            return False
        i = end

    if token[i : i + 1] == ".":
        end = _scan_digits(token, i + 1)
        if end == i + 1:
            return False
        i = end

    if token[i : i + 1] in ("e", "E"):
        i += 1
        if token[i : i + 1] in ("+", "-"):
            i += 1
        end = _scan_digits(token, i)
        if end == i:
            return False
        i = end

    return i == len(token)


def _parse_number_content(
    token: str, config: ParseConfig, doc: str, pos: Position
) -> JsonValueOrTransformed:
    """Converts a grammar-checked number token, applying the numeric hooks."""
    try:
        if "." in token or "e" in token or "E" in token:
            if config.parse_float:
                return config.parse_float(token)
            return float(token)
        if config.parse_int:
            return config.parse_int(token)
        return int(token)
    except ValueError as e:
        # Python's int conversion limit for very long digit strings
        if "Exceeds the limit" in str(e):
            raise MalformedJSONError("Number too large", doc, pos) from e
        raise MalformedJSONError("Invalid number", doc, pos) from e


class PartialScanner:
    """
    Single-pass recursive-descent parser tolerant of truncated input.

    Owns its text and cursor for one parse. Containers decide from their own
    Allow flag whether an IncompleteJSONError raised by a child is absorbed
    into a partial result or re-raised. Once a container absorbs one, the
    cursor jumps to the end of the text so that no enclosing container keeps
    consuming input.
    """

    def __init__(self, text: str, config: ParseConfig | None = None) -> None:
        self.text = text
        self.pos = 0
        self.length = len(text)
        self.config = config or ParseConfig()
        self.allow = self.config.allow

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else "\0"

    def at_end(self) -> bool:
        return self.pos >= self.length

    def skip_whitespace(self) -> None:
        """Skips whitespace characters according to JSON spec."""
        while self.pos < self.length and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def parse_value(self) -> JsonValueOrTransformed:
        """Parses any JSON value starting at the cursor."""
        with ProfileContext("parse_value"):
            self.skip_whitespace()
            if self.at_end():
                raise IncompleteJSONError(
                    "unexpected end of input", self.text, self.pos
                )

            char = self.peek()
            if char == '"':
                return self.parse_string()
            elif char == "{":
                return self.parse_object()
            elif char == "[":
                return self.parse_array()
            elif char == "-" or char in _DIGITS:
                return self.parse_number()
            else:
                return self.parse_literal()

    def parse_string(self) -> str:
        """Parses a string literal, possibly unterminated."""
        with ProfileContext("parse_string"):
            start = self.pos
            self.pos += 1
            escaped = False

            while self.pos < self.length:
                char = self.text[self.pos]
                self.pos += 1
                if char == "\\":
                    escaped = not escaped
                elif char == '"' and not escaped:
                    return _decode_string(
                        self.text[start + 1 : self.pos - 1], self.text, start + 1
                    )
                else:
                    escaped = False

            if Allow.STR not in self.allow:
                raise IncompleteJSONError(
                    "unterminated string", self.text, start
                )
            return _decode_partial_string(self.text[start + 1 :])

    def _scan_keyword(
        self,
        keywords: tuple[tuple[str, JsonValue, Allow], ...],
        min_partial: int,
    ) -> tuple[bool, JsonValue]:
        """
        Matches one of keywords at the cursor, fully or as a truncated prefix.

        A prefix only counts when it runs to the end of the text and is at
        least min_partial characters long. Returns (matched, value).
        """
        for keyword, value, _flag in keywords:
            if self.text.startswith(keyword, self.pos):
                self.pos += len(keyword)
                return True, value

        remaining = self.length - self.pos
        if remaining < min_partial:
            return False, None

        for keyword, value, flag in keywords:
            if remaining < len(keyword) and keyword.startswith(
                self.text[self.pos :]
            ):
                if flag not in self.allow:
                    raise MalformedJSONError(
                        f"unexpected {keyword}", self.text, self.pos
                    )
                self.pos = self.length
                return True, value

        return False, None

    def parse_number(self) -> JsonValueOrTransformed:
        """
        Parses a number, or the -Infinity / -NaN constants.

        With NUM allowed, a token that fails the grammar is retried with
        trailing '.', 'e', 'E', '+' and '-' stripped one at a time, so
        "-1.25e+" yields -1.25.
        """
        with ProfileContext("parse_number"):
            start = self.pos

            # -Infinity and -NaN must not reach the numeric scanner
            matched, value = self._scan_keyword(_SIGNED_KEYWORDS, 2)
            if matched:
                return value

            end = start
            while end < self.length and self.text[end] in _NUMBER_CHARS:
                end += 1
            self.pos = end
            token = self.text[start:end]

            if _is_json_number(token):
                return _parse_number_content(
                    token, self.config, self.text, start
                )

            if Allow.NUM not in self.allow:
                raise IncompleteJSONError("number literal", self.text, start)

            while token and token[-1] in _NUMBER_TAIL_CHARS:
                token = token[:-1]
                if token and _is_json_number(token):
                    return _parse_number_content(
                        token, self.config, self.text, start
                    )

            raise IncompleteJSONError("number literal", self.text, start)

    def parse_array(self) -> list[JsonValueOrTransformed]:
        """Parses an array, keeping a placeholder for a truncated element."""
        with ProfileContext("parse_array"):
            values: list[JsonValueOrTransformed] = []
            self.pos += 1
            self.skip_whitespace()

            while self.pos < self.length and self.text[self.pos] != "]":
                try:
                    if self.text[self.pos] in "{[":
                        # Reserve the slot before recursing
                        values.append(None)
                        values[-1] = self.parse_value()
                    else:
                        values.append(self.parse_value())
                except IncompleteJSONError:
                    if Allow.ARR not in self.allow:
                        raise
                    self.pos = self.length
                    return values

                self.skip_whitespace()
                if self.peek() == ",":
                    self.pos += 1
                    self.skip_whitespace()

            if self.pos < self.length:
                self.pos += 1
            elif Allow.ARR not in self.allow:
                raise IncompleteJSONError("array", self.text, self.pos)
            return values

    def parse_object(self) -> dict[str, JsonValueOrTransformed]:
        """Parses an object; a key whose value was cut off maps to None."""
        with ProfileContext("parse_object"):
            obj: dict[str, JsonValueOrTransformed] = {}
            self.pos += 1
            self.skip_whitespace()

            while self.pos < self.length and self.text[self.pos] != "}":
                if self.text[self.pos] != '"':
                    raise IncompleteJSONError(
                        "object key", self.text, self.pos
                    )
                key = self.parse_string()
                self.skip_whitespace()

                if self.peek() != ":":
                    raise IncompleteJSONError(
                        "missing ':'", self.text, self.pos
                    )
                self.pos += 1

                try:
                    obj[key] = self.parse_value()
                except IncompleteJSONError:
                    obj.setdefault(key, None)
                    if Allow.OBJ not in self.allow:
                        raise
                    self.pos = self.length
                    return obj

                self.skip_whitespace()
                if self.peek() == ",":
                    self.pos += 1
                    self.skip_whitespace()

            if self.pos < self.length:
                self.pos += 1
            elif Allow.OBJ not in self.allow:
                raise IncompleteJSONError("object", self.text, self.pos)
            return obj

    def parse_literal(self) -> JsonValue:
        """Parses null, true, false, Infinity or NaN, possibly truncated."""
        with ProfileContext("parse_literal"):
            matched, value = self._scan_keyword(_KEYWORDS, 1)
            if matched:
                return value
            raise MalformedJSONError("unexpected token", self.text, self.pos)


def _parse_value(text: str, config: ParseConfig) -> JsonValueOrTransformed:
    """
    Main parser entry point.

    Strips surrounding whitespace, rejects empty input, runs the scanner and
    rejects trailing data after a value that was parsed in full.
    """
    with ProfileContext("parse", len(text)):
        if text.startswith("\ufeff"):
            raise MalformedJSONError(
                "JSON input should not contain BOM (Byte Order Mark)", text, 0
            )

        stripped = text.strip(_WHITESPACE)
        if not stripped:
            raise MalformedJSONError("empty input", text, 0)

        scanner = PartialScanner(stripped, config)
        result = scanner.parse_value()

        scanner.skip_whitespace()
        if not scanner.at_end():
            raise MalformedJSONError("extra data", stripped, scanner.pos)

        return result


def parse(
    text: str, allow: Allow = Allow.ALL, **kwargs: Any
) -> JsonValueOrTransformed:
    """
    Parses possibly truncated JSON text into Python objects.

    Raises IncompleteJSONError when the text ends inside a construct whose
    kind is not in allow, and MalformedJSONError when the text can never
    become valid JSON. Extra keyword arguments are ParseConfig fields.
    """
    if not isinstance(text, str):
        raise TypeError(
            f"the JSON object must be str, not {type(text).__name__}"
        )

    config = ParseConfig(allow=allow, **kwargs)
    return _parse_value(text, config)


def loads(s: str, **kwargs: Any) -> JsonValueOrTransformed:
    """Parses JSON text with the json.loads call shape; see parse()."""
    return parse(s, **kwargs)


def load(fp: IO[str], **kwargs: Any) -> JsonValueOrTransformed:
    """
    Parses JSON from a file-like object holding a possibly truncated document.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


_MISSING: Any = object()

Snapshot = JsonValueOrTransformed | MalformedJSONError
SnapshotCallback = Callable[[Snapshot], None]


class PartialJSONStream:
    """
    Accumulates text chunks and publishes the latest reconstructed value.

    Every append re-parses the whole buffer. A successful parse becomes both
    the current snapshot and the last good one; an incomplete parse
    republishes the last good snapshot; a malformed parse publishes the
    MalformedJSONError itself. Fields are guarded by a lock, so snapshot
    reads are safe from other threads, but chunks should come from a single
    writer to keep their order meaningful.
    """

    def __init__(
        self,
        allow: Allow = Allow.ALL,
        *,
        on_update: SnapshotCallback | None = None,
        **kwargs: Any,
    ) -> None:
        self.config = StreamConfig(allow=allow, **kwargs)
        self._parse_config = self.config.parse_config()
        self._on_update = on_update
        self._lock = threading.Lock()
        self._buffer = ""
        self._current: Snapshot = _MISSING
        self._last_good: JsonValueOrTransformed = _MISSING

    @property
    def allow(self) -> Allow:
        return self.config.allow

    @property
    def buffer(self) -> str:
        """Text accumulated since creation or the last clear()."""
        with self._lock:
            return self._buffer

    @property
    def current(self) -> Snapshot:
        """
        The published snapshot: a value, a MalformedJSONError, or None when
        nothing has been published yet (see has_snapshot).
        """
        with self._lock:
            return None if self._current is _MISSING else self._current

    @property
    def has_snapshot(self) -> bool:
        """Distinguishes a published JSON null from no snapshot at all."""
        with self._lock:
            return self._current is not _MISSING

    @property
    def last_good(self) -> JsonValueOrTransformed:
        """Most recent value from a parse that did not fail, or None."""
        with self._lock:
            return None if self._last_good is _MISSING else self._last_good

    @property
    def is_malformed(self) -> bool:
        with self._lock:
            return isinstance(self._current, MalformedJSONError)

    def current_snapshot(self) -> Snapshot:
        """Returns the published snapshot; same as the current property."""
        return self.current

    def append(self, chunk: str) -> None:
        """Feeds the next text chunk and updates the published snapshot."""
        if not isinstance(chunk, str):
            raise TypeError(f"chunk must be str, not {type(chunk).__name__}")

        with self._lock:
            self._buffer += chunk
            halted = self.config.halt_on_malformed and isinstance(
                self._current, MalformedJSONError
            )
            if not halted:
                self._reparse()
            snapshot = None if self._current is _MISSING else self._current

        if self._on_update is not None:
            self._on_update(snapshot)

    def _reparse(self) -> None:
        """Parses the whole buffer and updates the snapshots. Caller holds the lock."""
        with ProfileContext("stream_append", len(self._buffer)):
            was_malformed = isinstance(self._current, MalformedJSONError)
            try:
                value = _parse_value(self._buffer, self._parse_config)
            except IncompleteJSONError:
                # Keep waiting for more text
                if self._last_good is not _MISSING:
                    self._current = self._last_good
                return
            except MalformedJSONError as e:
                if not was_malformed:
                    logger.debug("Stream buffer is malformed: %s", e)
                self._current = e
                return

            if was_malformed:
                logger.debug(
                    "Stream buffer parses again after %d chars",
                    len(self._buffer),
                )
            self._current = value
            self._last_good = value

    def extend(self, chunks: Iterable[str]) -> Snapshot:
        """Appends each chunk in order and returns the resulting snapshot."""
        for chunk in chunks:
            self.append(chunk)
        return self.current

    def clear(self) -> None:
        """Discards the buffer and both snapshots together."""
        with self._lock:
            self._buffer = ""
            self._current = _MISSING
            self._last_good = _MISSING
        logger.debug("Stream cleared")

    def __repr__(self) -> str:
        return f"PartialJSONStream({len(self.buffer)} chars)"


def iter_snapshots(
    chunks: Iterable[str], allow: Allow = Allow.ALL, **kwargs: Any
) -> Iterator[Snapshot]:
    """
    Feeds chunks through a fresh PartialJSONStream, yielding the snapshot
    published after each one.
    """
    stream = PartialJSONStream(allow, **kwargs)
    for chunk in chunks:
        stream.append(chunk)
        yield stream.current


__all__ = [
    "Allow",
    "HotPathStats",
    "IncompleteJSONError",
    "JSONDecodeError",
    "JsonValue",
    "MalformedJSONError",
    "ParseConfig",
    "PartialJSONStream",
    "PartialScanner",
    "Snapshot",
    "StreamConfig",
    "clear_hot_path_stats",
    "get_hot_path_stats",
    "iter_snapshots",
    "load",
    "loads",
    "parse",
]
