"""
TSON decoding library.

Decodes the compact, sigil-based TSON text format into Python values with a
single-pass recursive descent parser. The codec keeps a two-way shape like the
standard library json module, but only the decode direction is implemented.
"""

import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO
from typing import TypeAlias
from typing import Any

__version__ = "0.1.0"

# Type aliases for domain concepts - recursive definition
Value = (
    str | int | float | bool | None | dict[str, "Value"] | list["Value"]
)
Position: TypeAlias = int

# Union type for values that might be transformed by hooks
ValueOrTransformed = Value | Any

# Hook type definitions - hooks can return custom types
ObjectHook = Callable[[dict[str, ValueOrTransformed]], Any] | None
ArrayHook = Callable[[list[ValueOrTransformed]], Any] | None
ParseFloatHook = Callable[[str], Any] | None
ParseIntHook = Callable[[str], Any] | None

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "TSON_PROFILE" in os.environ

END_OF_INPUT = "\0"
BOM = "\ufeff"

# Marks an absent value where None is a legitimate result
_MISSING: Any = object()

_STRING_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}


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
    # Zero-cost in production - ignore arguments to nullcontext
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


class ErrorKind(Enum):
    """Categories of grammar violations reported by the parser."""

    UNEXPECTED_END_OF_INPUT = "unexpected_end_of_input"
    UNEXPECTED_CHARACTER = "unexpected_character"
    EXPECTED_PROPERTY_NAME = "expected_property_name"
    EXPECTED_CLOSE_BRACE = "expected_close_brace"
    EXPECTED_CLOSE_BRACKET = "expected_close_bracket"
    EXPECTED_ARRAY_OPEN_AFTER_TYPE_SPECIFIER = (
        "expected_array_open_after_type_specifier"
    )
    EXPECTED_TYPE_SPECIFIER_CLOSE = "expected_type_specifier_close"
    UNTERMINATED_STRING = "unterminated_string"
    INVALID_BOOLEAN_LITERAL = "invalid_boolean_literal"
    INVALID_NUMBER = "invalid_number"
    UNEXPECTED_TRAILING_CHARACTERS = "unexpected_trailing_characters"


class TSONDecodeError(ValueError):
    """
    Handles TSON parsing failures with precise position information.

    Carries the failure category, the offending offset and the 1-based line
    and column the cursor had reached when the grammar rule was violated.
    """

    def __init__(
        self,
        msg: str,
        doc: str = "",
        pos: Position = 0,
        kind: ErrorKind = ErrorKind.UNEXPECTED_CHARACTER,
        lineno: int | None = None,
        colno: int | None = None,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.kind = kind

        # Fall back to computing line and column from the offset
        if lineno is None:
            lineno = doc.count("\n", 0, pos) + 1 if doc else 1
        if colno is None:
            colno = pos - doc.rfind("\n", 0, pos) if doc else pos + 1
        self.lineno = lineno
        self.colno = colno

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            self.__class__,
            (self.msg, self.doc, self.pos, self.kind, self.lineno, self.colno),
        )


class TypedArray(list):  # type: ignore[type-arg]
    """
    Array decoded from ``<type>[...]`` syntax.

    The type specifier is kept verbatim as metadata; elements are decoded
    exactly as in an untyped array and are never checked against it.
    """

    __slots__ = ("type_specifier",)

    def __init__(self, items: Any = (), type_specifier: str = "") -> None:
        super().__init__(items)
        self.type_specifier = type_specifier

    def __repr__(self) -> str:
        return f"<{self.type_specifier}>{super().__repr__()}"

    def __reduce__(self) -> tuple[Any, ...]:
        return (self.__class__, (list(self), self.type_specifier))


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures TSON parsing behavior with immutable settings.

    Centralized configuration for conversion hooks and input handling.
    """

    parse_int: ParseIntHook = None
    parse_float: ParseFloatHook = None
    object_hook: ObjectHook = None
    array_hook: ArrayHook = None
    allow_bom: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.allow_bom, bool):
            raise TypeError("allow_bom must be a boolean")
        for name in ("parse_int", "parse_float", "object_hook", "array_hook"):
            hook = getattr(self, name)
            if hook is not None and not callable(hook):
                raise TypeError(f"{name} must be callable")


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_name_start(char: str) -> bool:
    return (
        "a" <= char <= "z" or "A" <= char <= "Z" or char == "_" or char == "$"
    )


def _is_name_part(char: str) -> bool:
    return _is_name_start(char) or _is_digit(char) or char in ".-"


class TsonCursor:
    """
    Owns the input text and the scan position.

    The only place that advances through the document; tracks the 1-based
    line and column alongside the offset as characters are consumed.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.length = len(text)
        self.line = 1
        self.col = 1

    def at_end(self) -> bool:
        return self.pos >= self.length

    def peek(self) -> str:
        """Returns current character without advancing."""
        return self.text[self.pos] if self.pos < self.length else END_OF_INPUT

    def peek_next(self) -> str:
        """Returns the character after the current one without advancing."""
        nxt = self.pos + 1
        return self.text[nxt] if nxt < self.length else END_OF_INPUT

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
            if char == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
        return char

    def match(self, expected: str) -> bool:
        """Consumes the current character if it equals ``expected``."""
        if self.pos < self.length and self.text[self.pos] == expected:
            self.advance()
            return True
        return False

    def starts_with(self, literal: str) -> bool:
        return self.text.startswith(literal, self.pos)

    def skip(self, count: int) -> None:
        for _ in range(count):
            self.advance()

    def skip_whitespace_and_comments(self) -> None:
        """Skips whitespace, line comments and block comments."""
        with ProfileContext("skip_whitespace_and_comments"):
            while self.pos < self.length:
                char = self.text[self.pos]
                if char in " \t\r\n":
                    self.advance()
                elif char == "/" and self.peek_next() == "/":
                    while self.pos < self.length and self.peek() != "\n":
                        self.advance()
                elif char == "/" and self.peek_next() == "*":
                    self.skip(2)
                    while self.pos < self.length and not (
                        self.peek() == "*" and self.peek_next() == "/"
                    ):
                        self.advance()
                    # Unterminated block comments run to end of input
                    if self.pos < self.length:
                        self.skip(2)
                else:
                    break

    def error(
        self, msg: str, kind: ErrorKind, pos: Position | None = None
    ) -> TSONDecodeError:
        """Builds a decode error anchored at the current cursor position."""
        if pos is None:
            return TSONDecodeError(
                msg, self.text, self.pos, kind, self.line, self.col
            )
        return TSONDecodeError(msg, self.text, pos, kind)


class TsonParser:
    """
    Recursive descent parser for TSON over a single cursor.

    One instance decodes one document; create a new parser per call since
    the cursor state is mutated in place.
    """

    def __init__(self, cursor: TsonCursor, config: ParseConfig):
        self.cursor = cursor
        self.config = config

    def parse(self) -> ValueOrTransformed:
        """Parses the whole document as exactly one top-level value."""
        cursor = self.cursor
        if cursor.peek() == BOM:
            if not self.config.allow_bom:
                raise cursor.error(
                    "Unexpected BOM (Byte Order Mark)",
                    ErrorKind.UNEXPECTED_CHARACTER,
                )
            cursor.advance()

        cursor.skip_whitespace_and_comments()
        result = self.parse_value(allow_name=True)
        cursor.skip_whitespace_and_comments()
        if not cursor.at_end():
            raise cursor.error(
                "Unexpected trailing characters",
                ErrorKind.UNEXPECTED_TRAILING_CHARACTERS,
            )
        return result

    def parse_value(self, allow_name: bool = False) -> ValueOrTransformed:
        """
        Parses any value at the cursor.

        When names are allowed, a leading name wraps the value that follows
        it into a single-key object; a name with no recognised value after it
        maps to None without consuming anything further.
        """
        cursor = self.cursor
        cursor.skip_whitespace_and_comments()
        if cursor.at_end():
            raise cursor.error(
                "Unexpected end of input", ErrorKind.UNEXPECTED_END_OF_INPUT
            )

        if allow_name and _is_name_start(cursor.peek()):
            name = self.parse_name()
            cursor.skip_whitespace_and_comments()
            return self._finish_object({name: self._parse_value_tail()})

        char = cursor.peek()
        if char == "-" and not _is_digit(cursor.peek_next()):
            # Undefined sentinel
            cursor.advance()
            return None

        value = self._parse_value_tail(missing=_MISSING)
        if value is _MISSING:
            raise cursor.error(
                f"Unexpected character: {char!r}",
                ErrorKind.UNEXPECTED_CHARACTER,
            )
        return value

    def _parse_value_tail(self, missing: Any = None) -> ValueOrTransformed:
        """
        Parses a sigil-introduced or structural value at the cursor.

        Returns ``missing`` without consuming input when the current
        character does not open a value.
        """
        cursor = self.cursor
        char = cursor.peek()
        if cursor.at_end():
            return missing

        if char == "{":
            cursor.advance()
            return self.parse_object()
        elif char == "[":
            cursor.advance()
            return self.parse_array()
        elif char == "<":
            cursor.advance()
            type_specifier = self.parse_type_specifier()
            if not cursor.match("["):
                raise cursor.error(
                    "Expected '[' after type specifier",
                    ErrorKind.EXPECTED_ARRAY_OPEN_AFTER_TYPE_SPECIFIER,
                )
            return self.parse_array(type_specifier)
        elif char == '"':
            cursor.advance()
            return self.parse_string()
        elif char == "#":
            cursor.advance()
            return self.parse_int()
        elif char == "=":
            cursor.advance()
            return self.parse_double()
        elif char == "?":
            cursor.advance()
            return self.parse_bool()
        return missing

    def parse_object(self) -> ValueOrTransformed:
        """Parses object members after the opening brace."""
        with ProfileContext("parse_object"):
            cursor = self.cursor
            members: dict[str, ValueOrTransformed] = {}
            cursor.skip_whitespace_and_comments()

            while not cursor.at_end() and cursor.peek() != "}":
                if not _is_name_start(cursor.peek()):
                    raise cursor.error(
                        "Expected property name",
                        ErrorKind.EXPECTED_PROPERTY_NAME,
                    )
                name = self.parse_name()
                cursor.skip_whitespace_and_comments()
                # Reassignment keeps the key's first position
                members[name] = self._parse_value_tail()

                cursor.skip_whitespace_and_comments()
                if not cursor.match(","):
                    break
                cursor.skip_whitespace_and_comments()

            if not cursor.match("}"):
                raise cursor.error(
                    "Expected '}' at end of object",
                    ErrorKind.EXPECTED_CLOSE_BRACE,
                )
            return self._finish_object(members)

    def parse_array(self, type_specifier: str | None = None) -> Any:
        """Parses array elements after the opening bracket."""
        with ProfileContext("parse_array"):
            cursor = self.cursor
            values: list[ValueOrTransformed] = (
                TypedArray(type_specifier=type_specifier)
                if type_specifier is not None
                else []
            )
            cursor.skip_whitespace_and_comments()

            while not cursor.at_end() and cursor.peek() != "]":
                values.append(self.parse_value(allow_name=True))

                cursor.skip_whitespace_and_comments()
                if not cursor.match(","):
                    break
                cursor.skip_whitespace_and_comments()

            if not cursor.match("]"):
                raise cursor.error(
                    "Expected ']' at end of array",
                    ErrorKind.EXPECTED_CLOSE_BRACKET,
                )

            if self.config.array_hook:
                return self.config.array_hook(values)
            return values

    def parse_name(self) -> str:
        """Scans an identifier starting at the cursor."""
        cursor = self.cursor
        start = cursor.pos
        if not _is_name_start(cursor.peek()):
            raise cursor.error(
                "Expected property name", ErrorKind.EXPECTED_PROPERTY_NAME
            )
        cursor.advance()
        while _is_name_part(cursor.peek()):
            cursor.advance()
        return cursor.text[start : cursor.pos]

    def parse_type_specifier(self) -> str:
        """Scans raw type specifier text up to and including ``>``."""
        cursor = self.cursor
        start = cursor.pos
        while not cursor.at_end() and cursor.peek() != ">":
            cursor.advance()
        type_specifier = cursor.text[start : cursor.pos]
        if not cursor.match(">"):
            raise cursor.error(
                "Expected '>' at end of type specifier",
                ErrorKind.EXPECTED_TYPE_SPECIFIER_CLOSE,
            )
        return type_specifier

    def parse_string(self) -> str:
        """Scans string content after the opening quote, resolving escapes."""
        with ProfileContext("parse_string"):
            cursor = self.cursor
            chunks: list[str] = []

            while not cursor.at_end() and cursor.peek() != '"':
                char = cursor.advance()
                if char == "\\":
                    if cursor.at_end():
                        break
                    escaped = cursor.advance()
                    # Unknown escapes keep the escaped character
                    chunks.append(_STRING_ESCAPES.get(escaped, escaped))
                else:
                    chunks.append(char)

            if not cursor.match('"'):
                raise cursor.error(
                    "Unterminated string", ErrorKind.UNTERMINATED_STRING
                )
            return "".join(chunks)

    def _scan_number(self, allow_fraction: bool) -> tuple[str, Position]:
        """Scans an optionally signed run of digits and returns the lexeme."""
        cursor = self.cursor
        start = cursor.pos
        cursor.match("-")
        seen_dot = False
        while True:
            char = cursor.peek()
            if _is_digit(char):
                cursor.advance()
            elif allow_fraction and char == "." and not seen_dot:
                seen_dot = True
                cursor.advance()
            else:
                break
        return cursor.text[start : cursor.pos], start

    def _convert_number(
        self,
        lexeme: str,
        start: Position,
        convert: Callable[[str], Any],
    ) -> Any:
        try:
            return convert(lexeme)
        except ValueError as e:
            # Python's int conversion limit surfaces as a ValueError too
            if "Exceeds the limit" in str(e):
                raise self.cursor.error(
                    "Number too large", ErrorKind.INVALID_NUMBER, start
                ) from e
            raise self.cursor.error(
                f"Invalid number: {lexeme!r}", ErrorKind.INVALID_NUMBER, start
            ) from e

    def parse_int(self) -> ValueOrTransformed:
        """Parses an integer literal after the ``#`` sigil."""
        with ProfileContext("parse_int"):
            lexeme, start = self._scan_number(allow_fraction=False)
            if not lexeme.lstrip("-"):
                raise self.cursor.error(
                    f"Invalid number: {lexeme!r}",
                    ErrorKind.INVALID_NUMBER,
                    start,
                )
            if self.config.parse_int:
                return self.config.parse_int(lexeme)
            return self._convert_number(lexeme, start, int)

    def parse_double(self) -> ValueOrTransformed:
        """Parses a floating point literal after the ``=`` sigil."""
        with ProfileContext("parse_double"):
            lexeme, start = self._scan_number(allow_fraction=True)
            if not lexeme.lstrip("-").replace(".", "", 1):
                raise self.cursor.error(
                    f"Invalid number: {lexeme!r}",
                    ErrorKind.INVALID_NUMBER,
                    start,
                )
            if self.config.parse_float:
                return self.config.parse_float(lexeme)
            return self._convert_number(lexeme, start, float)

    def parse_bool(self) -> bool:
        """Matches ``true`` or ``false`` exactly after the ``?`` sigil."""
        cursor = self.cursor
        if cursor.starts_with("true"):
            cursor.skip(4)
            return True
        if cursor.starts_with("false"):
            cursor.skip(5)
            return False
        raise cursor.error(
            "Invalid boolean value", ErrorKind.INVALID_BOOLEAN_LITERAL
        )

    def _finish_object(
        self, members: dict[str, ValueOrTransformed]
    ) -> ValueOrTransformed:
        if self.config.object_hook:
            return self.config.object_hook(members)
        return members


def _parse_document(s: str, config: ParseConfig) -> ValueOrTransformed:
    """Main parser entry point: one fresh cursor and parser per document."""
    with ProfileContext("parse_document", len(s)):
        cursor = TsonCursor(s)
        parser = TsonParser(cursor, config)
        return parser.parse()


def loads(s: str, **kwargs: Any) -> ValueOrTransformed:
    """
    Parses a TSON string into Python objects.

    Validates input type and delegates to a fresh parser with immutable
    configuration.
    """
    if not isinstance(s, str):
        raise TypeError(
            f"the TSON document must be str, not {type(s).__name__}"
        )

    config = ParseConfig(**kwargs)
    return _parse_document(s, config)


decode = loads


def load(fp: IO[str], **kwargs: Any) -> ValueOrTransformed:
    """
    Parses TSON from a text file-like object.
    """
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


def dumps(obj: Any, **kwargs: Any) -> str:
    """
    Serializes Python objects to TSON text.

    TSON encoding is not supported; the function exists so the codec keeps
    both directions.
    """
    raise NotImplementedError("TSON encoding is not implemented")


encode = dumps


def dump(obj: Any, fp: IO[str], **kwargs: Any) -> None:
    """
    Serializes Python objects to a TSON file. Not supported.
    """
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(dumps(obj, **kwargs))


class TsonCodec:
    """Two-way TSON codec; only decoding is available."""

    def __init__(self, **kwargs: Any) -> None:
        self.config = ParseConfig(**kwargs)

    def decode(self, s: str) -> ValueOrTransformed:
        if not isinstance(s, str):
            raise TypeError(
                f"the TSON document must be str, not {type(s).__name__}"
            )
        return _parse_document(s, self.config)

    def encode(self, obj: Any) -> str:
        return dumps(obj)


codec = TsonCodec()


__all__ = [
    "ErrorKind",
    "HotPathStats",
    "ParseConfig",
    "TSONDecodeError",
    "TsonCodec",
    "TsonCursor",
    "TsonParser",
    "TypedArray",
    "Value",
    "clear_hot_path_stats",
    "codec",
    "decode",
    "dump",
    "dumps",
    "encode",
    "get_hot_path_stats",
    "load",
    "loads",
]
