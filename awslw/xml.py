# -*- coding: utf-8 -*-
# awslw, Lightweight Python client for AWS REST APIs,
# (C) 2025 The awslw Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
awslw.xml
~~~~~~~~~

Minimal XML decoding for AWS response bodies. Only element names, nesting
and text content are kept; attributes, comments, processing instructions
and document type declarations are skipped. Namespace prefixes are
stripped from element names.

    >>> root = parse(b"<A><B>x</B><B>y</B></A>")
    >>> [b.content for b in root.children_with_name("B")]
    ['x', 'y']

:copyright: (c) 2025 by The awslw Authors.
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

from typing import Optional, Sequence

from .error import ParseError

_ENTITIES = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}
_NAME_TERMINATORS = frozenset(" \t\r\n/>=<")


class XmlElement:
    """XML element with name, text content and ordered children."""

    def __init__(
            self,
            name: str,
            content: str = "",
            children: Optional[Sequence[XmlElement]] = None,
    ):
        self._name = name
        self._content = content
        self._children = tuple(children or ())

    @property
    def name(self) -> str:
        """Get element name without namespace prefix."""
        return self._name

    @property
    def content(self) -> str:
        """Get text content, empty if none."""
        return self._content

    @property
    def children(self) -> tuple[XmlElement, ...]:
        """Get child elements in document order."""
        return self._children

    def children_with_name(self, name: str) -> list[XmlElement]:
        """Get all children with given name in document order."""
        return [child for child in self._children if child.name == name]

    def has_child(self, name: str) -> bool:
        """Check whether a child with given name exists."""
        return any(child.name == name for child in self._children)

    def child(self, name: str) -> XmlElement:
        """
        Get the single child with given name. Raises ParseError if no child
        or more than one child has that name.
        """
        children = self.children_with_name(name)
        if not children:
            raise ParseError(
                f"XML element <{name}> not found in <{self._name}>",
            )
        if len(children) > 1:
            raise ParseError(
                f"XML element <{name}> is ambiguous in <{self._name}>; "
                f"found {len(children)}",
            )
        return children[0]

    def child_text(self, name: str) -> str:
        """Get text content of the single child with given name."""
        return self.child(name).content

    def path(self, *names: str) -> XmlElement:
        """
        Descend through single children by name. Each name may itself be a
        '/' separated path, e.g. ``path("GetQueueUrlResult/QueueUrl")``.
        """
        element = self
        for name in names:
            for token in name.split("/"):
                if token:
                    element = element.child(token)
        return element

    def __eq__(self, other):
        if not isinstance(other, XmlElement):
            return NotImplemented
        return (
            self._name == other._name and
            self._content == other._content and
            self._children == other._children
        )

    def __hash__(self):
        return hash((self._name, self._content, self._children))

    def __repr__(self):
        return (
            f"XmlElement(name={self._name!r}, content={self._content!r}, "
            f"children={list(self._children)!r})"
        )


def _decode_reference(reference: str) -> str:
    """Decode entity or character reference body."""
    try:
        if reference.startswith("#x") or reference.startswith("#X"):
            return chr(int(reference[2:], 16))
        if reference.startswith("#"):
            return chr(int(reference[1:], 10))
    except (ValueError, OverflowError) as exc:
        raise ParseError(
            f"invalid character reference &{reference};",
        ) from exc
    if reference in _ENTITIES:
        return _ENTITIES[reference]
    raise ParseError(f"unknown entity &{reference};")


def _decode_text(text: str) -> str:
    """Replace entity and character references in text."""
    if "&" not in text:
        return text

    parts = []
    pos = 0
    while True:
        start = text.find("&", pos)
        if start < 0:
            parts.append(text[pos:])
            return "".join(parts)
        end = text.find(";", start)
        if end < 0:
            raise ParseError("unterminated entity reference")
        parts.append(text[pos:start])
        parts.append(_decode_reference(text[start + 1:end]))
        pos = end + 1


class _Parser:
    """Recursive descent parser over decoded XML text."""

    def __init__(self, text: str):
        self._text = text
        self._pos = 0

    def _error(self, message: str) -> ParseError:
        return ParseError(f"{message} at offset {self._pos}")

    def _at_end(self) -> bool:
        return self._pos >= len(self._text)

    def _startswith(self, prefix: str) -> bool:
        return self._text.startswith(prefix, self._pos)

    def _skip_whitespace(self):
        while not self._at_end() and self._text[self._pos].isspace():
            self._pos += 1

    def _skip_past(self, terminator: str, what: str):
        end = self._text.find(terminator, self._pos)
        if end < 0:
            raise self._error(f"unterminated {what}")
        self._pos = end + len(terminator)

    def _skip_doctype(self):
        depth = 0
        while not self._at_end():
            char = self._text[self._pos]
            self._pos += 1
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
            elif char == ">" and depth <= 0:
                return
        raise self._error("unterminated document type declaration")

    def _skip_misc(self):
        """Skip whitespace, comments, processing instructions and DTD."""
        while True:
            self._skip_whitespace()
            if self._startswith("<?"):
                self._skip_past("?>", "processing instruction")
            elif self._startswith("<!--"):
                self._skip_past("-->", "comment")
            elif self._startswith("<!DOCTYPE"):
                self._skip_doctype()
            else:
                return

    def _read_name(self) -> str:
        start = self._pos
        while (
                not self._at_end() and
                self._text[self._pos] not in _NAME_TERMINATORS
        ):
            self._pos += 1
        if start == self._pos:
            raise self._error("missing element name")
        return self._text[start:self._pos]

    def _skip_attribute(self):
        self._read_name()
        self._skip_whitespace()
        if not self._startswith("="):
            raise self._error("missing '=' in attribute")
        self._pos += 1
        self._skip_whitespace()
        if self._at_end() or self._text[self._pos] not in "'\"":
            raise self._error("unquoted attribute value")
        quote = self._text[self._pos]
        self._pos += 1
        self._skip_past(quote, "attribute value")

    def parse_document(self) -> XmlElement:
        """Parse prolog, root element and trailing misc."""
        if self._startswith("\ufeff"):
            self._pos += 1
        self._skip_misc()
        if self._at_end():
            raise self._error("no root element")
        root = self._parse_element()
        self._skip_misc()
        if not self._at_end():
            raise self._error("unexpected content after root element")
        return root

    def _parse_start_tag(self) -> tuple[str, bool]:
        """Read start tag; return raw tag and whether it is self-closing."""
        if not self._startswith("<"):
            raise self._error("expected '<'")
        self._pos += 1
        tag = self._read_name()
        while True:
            self._skip_whitespace()
            if self._at_end():
                raise self._error(f"unterminated start tag <{tag}>")
            if self._startswith("/>"):
                self._pos += 2
                return tag, True
            if self._startswith(">"):
                self._pos += 1
                return tag, False
            self._skip_attribute()

    def _parse_element(self) -> XmlElement:
        tag, empty = self._parse_start_tag()
        if empty:
            return XmlElement(tag.rpartition(":")[2])

        # Open elements as (tag, children, texts); nesting depth is not
        # bounded by the interpreter stack.
        stack: list[tuple[str, list[XmlElement], list[str]]] = [
            (tag, [], []),
        ]
        while True:
            tag, children, texts = stack[-1]
            if self._at_end():
                raise self._error(f"unterminated element <{tag}>")
            if self._startswith("</"):
                self._pos += 2
                closing = self._read_name()
                if closing != tag:
                    raise self._error(
                        f"mismatched closing tag </{closing}> for <{tag}>",
                    )
                self._skip_whitespace()
                if not self._startswith(">"):
                    raise self._error(f"unterminated end tag </{closing}>")
                self._pos += 1
                stack.pop()
                element = XmlElement(
                    tag.rpartition(":")[2], "".join(texts), children,
                )
                if not stack:
                    return element
                stack[-1][1].append(element)
            elif self._startswith("<!--"):
                self._skip_past("-->", "comment")
            elif self._startswith("<![CDATA["):
                start = self._pos + len("<![CDATA[")
                self._skip_past("]]>", "CDATA section")
                texts.append(self._text[start:self._pos - len("]]>")])
            elif self._startswith("<?"):
                self._skip_past("?>", "processing instruction")
            elif self._startswith("<"):
                child_tag, empty = self._parse_start_tag()
                if empty:
                    children.append(XmlElement(child_tag.rpartition(":")[2]))
                else:
                    stack.append((child_tag, [], []))
            else:
                end = self._text.find("<", self._pos)
                end = len(self._text) if end < 0 else end
                text = self._text[self._pos:end]
                self._pos = end
                # Whitespace between elements is not content.
                if not text.isspace():
                    texts.append(_decode_text(text))


def parse(data: bytes | str) -> XmlElement:
    """Parse XML document in bytes or string into element tree."""
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"XML is not UTF-8 encoded; {exc}") from exc
    return _Parser(data).parse_document()
