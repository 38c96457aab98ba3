"""Query annotations that are either a literal or a `?` placeholder."""

import re
from dataclasses import dataclass
from typing import Any, ClassVar, Optional

PLACEHOLDER = "?"

_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")


class InvalidLiteralError(ValueError):
    """Raised when an annotation is neither `?` nor a valid literal."""

    def __init__(self, kind: str, literal: str):
        super().__init__(f"Invalid {kind} literal: {literal!r}")
        self.kind = kind
        self.literal = literal


@dataclass(frozen=True)
class Annotation:
    """Base for annotation values.

    A value of None means the annotation is parameterized, i.e. written as
    `?` in the query and bound at execution time. Fixed values are checked
    on construction.
    """

    kind: ClassVar[str] = "annotation"

    value: Optional[Any]

    def __post_init__(self):
        if self.value is not None:
            self._check(self.value)

    @classmethod
    def _check(cls, value: Any) -> None:
        pass

    @classmethod
    def parameterized(cls):
        return cls(None)

    @classmethod
    def fixed(cls, value):
        if value is None:
            raise ValueError(f"Fixed {cls.kind} requires a value")
        return cls(value)

    @property
    def is_parameterized(self) -> bool:
        return self.value is None

    def __str__(self) -> str:
        if self.is_parameterized:
            return PLACEHOLDER
        return str(self.value)

    def __repr__(self) -> str:
        if self.is_parameterized:
            return f"{self.__class__.__name__}.Parameterized"
        return f"{self.__class__.__name__}.Fixed({self.value!r})"


@dataclass(frozen=True, repr=False)
class Ttl(Annotation):
    """Time to live of written cells, in seconds (signed 32 bit)."""

    kind: ClassVar[str] = "TTL"

    value: Optional[int]

    @classmethod
    def _check(cls, value: Any) -> None:
        _check_signed_integer(cls.kind, value, 32)

    @classmethod
    def parse(cls, literal: str) -> "Ttl":
        return parse_ttl(literal)


@dataclass(frozen=True, repr=False)
class Timestamp(Annotation):
    """Write timestamp in milliseconds since the UNIX epoch (signed 64 bit)."""

    kind: ClassVar[str] = "TIMESTAMP"

    value: Optional[int]

    @classmethod
    def _check(cls, value: Any) -> None:
        _check_signed_integer(cls.kind, value, 64)

    @classmethod
    def parse(cls, literal: str) -> "Timestamp":
        return parse_timestamp(literal)


@dataclass(frozen=True, repr=False)
class Timeout(Annotation):
    """Server side timeout as a CQL duration literal, e.g. 5ms or 1h."""

    kind: ClassVar[str] = "TIMEOUT"

    value: Optional[str]

    @classmethod
    def _check(cls, value: Any) -> None:
        if not isinstance(value, str):
            raise TypeError(f"{cls.kind} value must be a str, got {type(value).__name__}")

    @classmethod
    def parse(cls, literal: str) -> "Timeout":
        return parse_timeout(literal)


def _fits(value: int, bits: int) -> bool:
    bound = 1 << (bits - 1)
    return -bound <= value < bound


def _check_signed_integer(kind: str, value: Any, bits: int) -> None:
    # bool is an int subclass but never a valid TTL or timestamp
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind} value must be an int, got {type(value).__name__}")
    if not _fits(value, bits):
        raise InvalidLiteralError(kind, str(value))


def _parse_signed_integer(kind: str, literal: str, bits: int) -> int:
    """Parse a decimal integer that must fit in a signed integer of `bits`."""
    if not _INTEGER_LITERAL.fullmatch(literal):
        raise InvalidLiteralError(kind, literal)
    value = int(literal)
    if not _fits(value, bits):
        raise InvalidLiteralError(kind, literal)
    return value


def parse_ttl(literal: str) -> Ttl:
    """Parse a TTL annotation.

    Args:
        literal: Annotation text as written after `USING TTL`

    Returns:
        Parameterized Ttl for `?`, fixed Ttl otherwise

    Raises:
        InvalidLiteralError: If the text is not a signed 32 bit integer
    """
    if literal == PLACEHOLDER:
        return Ttl.parameterized()
    return Ttl.fixed(_parse_signed_integer(Ttl.kind, literal, 32))


def parse_timestamp(literal: str) -> Timestamp:
    """Parse a timestamp annotation.

    Args:
        literal: Annotation text as written after `USING TIMESTAMP`

    Returns:
        Parameterized Timestamp for `?`, fixed Timestamp otherwise

    Raises:
        InvalidLiteralError: If the text is not a signed 64 bit integer
    """
    if literal == PLACEHOLDER:
        return Timestamp.parameterized()
    return Timestamp.fixed(_parse_signed_integer(Timestamp.kind, literal, 64))


def parse_timeout(literal: str) -> Timeout:
    """Parse a timeout annotation.

    Any text other than `?` is kept verbatim; duration syntax is checked by
    the server when the statement is prepared.
    """
    if literal == PLACEHOLDER:
        return Timeout.parameterized()
    return Timeout.fixed(literal)
