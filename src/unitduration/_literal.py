"""Tagged literal binding for durations.

A tagged literal pairs a reserved tag with a quoted payload so that
typed values can be embedded in, and recovered from, larger structured
text::

    #unit/duration "123ms"
    #unit/duration "1D 10h 17m 36s"
    #unit/duration ""

The binding is thin: reading a literal is exactly
:func:`~unitduration._codec.parse_duration` on the payload, printing is
exactly :func:`~unitduration._codec.format_duration` wrapped in the tag
syntax.

:class:`LiteralRegistry` keeps the tag → codec mapping, so further tagged
types can be registered next to the duration codec.  The module-level
helpers operate on :data:`default_registry`, which has the duration
codec pre-registered under :data:`DURATION_TAG`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from unitduration._codec import format_duration, parse_duration
from unitduration._duration import Duration
from unitduration._errors import LiteralSyntaxError

logger = logging.getLogger(__name__)

DURATION_TAG = "#unit/duration"

_TAG_PATTERN = r"#[A-Za-z][\w.\-]*/[A-Za-z][\w.\-]*"
_PAYLOAD_PATTERN = r'"(?P<payload>[^"\\\n]*)"'
_LITERAL_RE = re.compile(rf"\s*(?P<tag>{_TAG_PATTERN})\s*{_PAYLOAD_PATTERN}\s*")
_TAG_RE = re.compile(_TAG_PATTERN)

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TaggedLiteral:
    """A tagged literal located inside a larger document.

    Attributes:
        tag: The literal's tag, e.g. ``"#unit/duration"``.
        payload: The unquoted payload string.
        span: ``(start, end)`` offsets of the literal in the document.
    """

    tag: str
    payload: str
    span: tuple[int, int]


@dataclass(frozen=True, slots=True)
class LiteralCodec:
    """Reader/printer pair bound to a tag and a Python type."""

    tag: str
    type: type
    reader: Callable[[str], Any]
    printer: Callable[[Any], str]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class LiteralRegistry:
    """Tag → codec mapping for reading and printing tagged literals.

    Example::

        registry = LiteralRegistry()
        registry.register(DURATION_TAG, Duration, parse_duration, format_duration)
        registry.dumps(Duration.of_millis(123))   # '#unit/duration "123ms"'
        registry.loads('#unit/duration "1m"')     # Duration('1m')
    """

    def __init__(self) -> None:
        self._by_tag: dict[str, LiteralCodec] = {}
        self._by_type: dict[type, LiteralCodec] = {}

    @property
    def tags(self) -> tuple[str, ...]:
        """Registered tags, in registration order."""
        return tuple(self._by_tag)

    def register(
        self,
        tag: str,
        type_: type,
        reader: Callable[[str], Any],
        printer: Callable[[Any], str],
    ) -> None:
        """Bind *tag* to a reader and printer for *type_*.

        Raises:
            ValueError: If *tag* is malformed or already registered, or
                *type_* already has a codec.
        """
        if not _TAG_RE.fullmatch(tag):
            msg = f"Invalid tag {tag!r}; expected '#namespace/name'"
            raise ValueError(msg)
        if tag in self._by_tag:
            msg = f"Tag {tag!r} is already registered"
            raise ValueError(msg)
        if type_ in self._by_type:
            msg = f"Type {type_.__name__} already has a tagged literal codec"
            raise ValueError(msg)
        codec = LiteralCodec(tag=tag, type=type_, reader=reader, printer=printer)
        self._by_tag[tag] = codec
        self._by_type[type_] = codec
        logger.debug("Registered tagged literal %s for %s", tag, type_.__name__)

    def _codec_for_value(self, value: object) -> LiteralCodec:
        for klass in type(value).__mro__:
            codec = self._by_type.get(klass)
            if codec is not None:
                return codec
        msg = f"No tagged literal codec registered for {type(value).__name__}"
        raise TypeError(msg)

    def _codec_for_tag(self, tag: str, text: str) -> LiteralCodec:
        codec = self._by_tag.get(tag)
        if codec is None:
            raise LiteralSyntaxError(text)
        return codec

    # -- single literals ----------------------------------------------------

    def dumps(self, value: object) -> str:
        """Print *value* as ``<tag> "<payload>"``.

        Raises:
            TypeError: If no codec is registered for the value's type.
        """
        codec = self._codec_for_value(value)
        return f'{codec.tag} "{codec.printer(value)}"'

    def loads(self, text: str) -> Any:
        """Read a single tagged literal (surrounding whitespace allowed).

        Raises:
            LiteralSyntaxError: If *text* is not one literal or its tag
                is not registered.
            DurationSyntaxError: If the payload is rejected by the reader.
        """
        match = _LITERAL_RE.fullmatch(text)
        if match is None:
            raise LiteralSyntaxError(text)
        codec = self._codec_for_tag(match["tag"], text)
        return codec.reader(match["payload"])

    # -- documents ----------------------------------------------------------

    def _document_re(self) -> re.Pattern[str]:
        tags = "|".join(re.escape(tag) for tag in self._by_tag) or r"(?!)"
        return re.compile(rf"(?P<tag>{tags})(?![\w.\-/])\s*{_PAYLOAD_PATTERN}")

    def find(self, document: str) -> Iterator[TaggedLiteral]:
        """Yield every literal with a registered tag in *document*."""
        for match in self._document_re().finditer(document):
            yield TaggedLiteral(
                tag=match["tag"],
                payload=match["payload"],
                span=match.span(),
            )

    def read(self, document: str) -> Iterator[Any]:
        """Yield the decoded value of every literal in *document*."""
        for literal in self.find(document):
            yield self._by_tag[literal.tag].reader(literal.payload)

    def replace(
        self,
        document: str,
        func: Callable[[Any], Any] | None = None,
    ) -> str:
        """Rewrite every literal in *document*.

        Each literal is decoded, passed through *func* (identity when
        ``None``) and printed again, which also canonicalises payloads
        such as ``"90s"`` → ``"1m 30s"``.
        """

        def _substitute(match: re.Match[str]) -> str:
            value = self._by_tag[match["tag"]].reader(match["payload"])
            if func is not None:
                value = func(value)
            return self.dumps(value)

        return self._document_re().sub(_substitute, document)


default_registry = LiteralRegistry()
default_registry.register(DURATION_TAG, Duration, parse_duration, format_duration)

# ---------------------------------------------------------------------------
# Module-level helpers (default registry)
# ---------------------------------------------------------------------------


def to_literal(duration: Duration) -> str:
    """Print *duration* as ``#unit/duration "<canonical>"``."""
    if not isinstance(duration, Duration):
        msg = f"expected Duration, got {type(duration).__name__}"
        raise TypeError(msg)
    return default_registry.dumps(duration)


def from_literal(text: str) -> Duration:
    """Read a ``#unit/duration "..."`` literal.

    Raises:
        LiteralSyntaxError: If *text* is malformed or uses another tag.
        DurationSyntaxError: If the payload is not a valid duration.
    """
    match = _LITERAL_RE.fullmatch(text)
    if match is None or match["tag"] != DURATION_TAG:
        raise LiteralSyntaxError(text)
    return parse_duration(match["payload"])


def find_literals(document: str) -> Iterator[TaggedLiteral]:
    """Yield every registered tagged literal found in *document*."""
    return default_registry.find(document)


def read_literals(document: str) -> list[Any]:
    """Decode every registered tagged literal found in *document*."""
    return list(default_registry.read(document))


def replace_literals(
    document: str,
    func: Callable[[Any], Any] | None = None,
) -> str:
    """Rewrite every registered tagged literal in *document*."""
    return default_registry.replace(document, func)
