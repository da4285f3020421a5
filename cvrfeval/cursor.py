"""Forward-only element cursor over a tokenized XML document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union

from lxml import etree

from .constants import TAG_CVRF_DOC
from .exceptions import CvrfParseError

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    START = "start"
    END = "end"
    TEXT = "text"


@dataclass(frozen=True)
class Event:
    kind: NodeKind
    name: str  # local name; empty for text
    depth: int
    attrs: dict[str, str] = field(default_factory=dict)
    text: str = ""


def _xml_parser() -> etree.XMLParser:
    # Internal DTD entities are expanded, external ones are never loaded
    return etree.XMLParser(
        recover=False,
        resolve_entities="internal",
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )


def _add_text(text: Optional[str], depth: int, events: list[Event]) -> None:
    # Whitespace-only text between elements is insignificant
    if text and text.strip():
        events.append(Event(NodeKind.TEXT, "", depth, text=text))


def _walk(element: etree._Element, depth: int, events: list[Event]) -> None:
    name = etree.QName(element).localname
    attrs = {etree.QName(key).localname: value for key, value in element.attrib.items()}
    events.append(Event(NodeKind.START, name, depth, attrs))
    _add_text(element.text, depth + 1, events)
    for child in element:
        if isinstance(child.tag, str):
            _walk(child, depth + 1, events)
        _add_text(child.tail, depth + 1, events)
    events.append(Event(NodeKind.END, name, depth))


def tokenize(markup: Union[str, bytes]) -> list[Event]:
    """Tokenize an XML document into start/end/text events in document order.

    Raises:
        CvrfParseError: the markup is not well-formed XML
    """
    if isinstance(markup, str):
        markup = markup.encode("utf-8")
    try:
        root = etree.fromstring(markup, _xml_parser())
    except etree.XMLSyntaxError as e:
        raise CvrfParseError(TAG_CVRF_DOC, f"Malformed XML: {e}") from e
    events: list[Event] = []
    _walk(root, 0, events)
    logger.debug("Tokenized document into %d events", len(events))
    return events


class ElementCursor:
    """Forward-only cursor over an event list.

    The cursor never moves backwards. Parse functions are called with the
    cursor on their element's start event and return it positioned on the
    event right after the matching end event.
    """

    def __init__(self, events: list[Event]):
        self._events = events
        self._pos = 0

    @classmethod
    def from_markup(cls, markup: Union[str, bytes]) -> ElementCursor:
        return cls(tokenize(markup))

    @property
    def position(self) -> int:
        return self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._events)

    @property
    def current(self) -> Optional[Event]:
        if self.at_end:
            return None
        return self._events[self._pos]

    @property
    def name(self) -> str:
        event = self.current
        return event.name if event else ""

    @property
    def kind(self) -> Optional[NodeKind]:
        event = self.current
        return event.kind if event else None

    @property
    def depth(self) -> int:
        event = self.current
        return event.depth if event else -1

    def is_start(self, tag: Optional[str] = None) -> bool:
        event = self.current
        if event is None or event.kind is not NodeKind.START:
            return False
        return tag is None or event.name == tag

    @property
    def is_empty(self) -> bool:
        """True when the current start event is immediately closed."""
        if not self.is_start():
            return False
        following = self._pos + 1
        return following < len(self._events) and self._events[following].kind is NodeKind.END

    def attr(self, name: str) -> Optional[str]:
        event = self.current
        if event is None or event.kind is not NodeKind.START:
            return None
        return event.attrs.get(name)

    def expect(self, tag: str) -> None:
        if not self.is_start(tag):
            found = self.name or "end of document"
            raise CvrfParseError(tag, f"Expected <{tag}>, found {found}")

    def next_node(self) -> None:
        if not self.at_end:
            self._pos += 1

    def next_element(self) -> None:
        """Advance to the next start event."""
        self.next_node()
        while not self.at_end and self.kind is not NodeKind.START:
            self._pos += 1

    def close(self, tag: str, depth: int) -> None:
        """Move past the end event of the enclosing <tag> opened at ``depth``."""
        while not self.at_end:
            event = self._events[self._pos]
            self._pos += 1
            if event.kind is NodeKind.END and event.depth == depth:
                return
        raise CvrfParseError(tag, f"Missing closing tag </{tag}>")

    def skip(self) -> None:
        """Move past the current element's subtree."""
        if not self.is_start():
            self.next_node()
            return
        tag, depth = self.name, self.depth
        self._pos += 1
        self.close(tag, depth)

    def text(self) -> Optional[str]:
        """Text content of the current element; moves past it.

        Returns None when the element has no text.
        """
        if not self.is_start():
            return None
        tag, depth = self.name, self.depth
        self._pos += 1
        parts = []
        while not self.at_end:
            event = self._events[self._pos]
            if event.kind is NodeKind.END and event.depth == depth:
                break
            if event.kind is NodeKind.TEXT:
                parts.append(event.text)
            self._pos += 1
        self.close(tag, depth)
        content = "".join(parts).strip()
        return content or None

    def children(self) -> Iterator[str]:
        """Iterate over the child elements of the current element.

        Yields each child's local name with the cursor on its start event.
        A child the caller does not consume is skipped. When iteration
        finishes the cursor is past the parent's end event.
        """
        if not self.is_start():
            raise CvrfParseError(self.name or "document", "Expected an element")
        tag, depth = self.name, self.depth
        self._pos += 1
        while True:
            if self.at_end:
                raise CvrfParseError(tag, f"Missing closing tag </{tag}>")
            event = self._events[self._pos]
            if event.kind is NodeKind.END and event.depth == depth:
                self._pos += 1
                return
            if event.kind is not NodeKind.START:
                self._pos += 1
                continue
            before = self._pos
            yield event.name
            if self._pos == before:
                self.skip()
