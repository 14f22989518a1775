"""Tag parsing, merging and grouping.

Tags travel as strings (``key=value``, ``marker``, ``!directive=payload``)
in ``.tags`` files and in ``index.json``. Internally they are parsed once into
:class:`KeyValue`, :class:`Marker` or :class:`Directive`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Union

from manualshelf.models import METADATA_FIELDS, ExtractedMetadata

DIRECTIVE_PREFIX = "!"
OTHER_SECTION = "other"
RESERVED_KEYS = METADATA_FIELDS

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True, slots=True)
class KeyValue:
    key: str
    value: str

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


@dataclass(frozen=True, slots=True)
class Marker:
    token: str

    def __str__(self) -> str:
        return self.token


@dataclass(frozen=True, slots=True)
class Directive:
    name: str
    payload: str | None = None

    def __str__(self) -> str:
        if self.payload is None:
            return DIRECTIVE_PREFIX + self.name
        return f"{DIRECTIVE_PREFIX}{self.name}={self.payload}"


Tag = Union[KeyValue, Marker, Directive]


def parse_tag(text: str) -> Tag:
    """Parse one textual tag, splitting ``key=value`` at the first ``=`` only."""
    if text.startswith(DIRECTIVE_PREFIX):
        name, sep, payload = text[1:].partition("=")
        return Directive(name=name, payload=payload if sep else None)
    key, sep, value = text.partition("=")
    if sep and _KEY_RE.match(key):
        return KeyValue(key=key, value=value)
    return Marker(token=text)


def parse_tags(texts: Iterable[str]) -> List[Tag]:
    return [parse_tag(text) for text in texts]


def format_tags(tags: Iterable[Tag]) -> List[str]:
    return [str(tag) for tag in tags]


def auto_tags(metadata: ExtractedMetadata) -> List[str]:
    """``key=value`` tags for every non-empty extracted field."""
    tags = []
    for name in METADATA_FIELDS:
        value = getattr(metadata, name)
        if value:
            tags.append(f"{name}={value}")
    return tags


def merge_tags(auto: Sequence[str], user: Sequence[str]) -> List[str]:
    """Combine auto-derived and user tags; user keys win.

    Tags are keyed: ``key=value`` by ``key``, anything without ``=`` by its
    own text. Insertion order is kept, so overridden keys stay where they
    were first seen. A key equal to its value flattens back to a bare token.
    """
    merged: Dict[str, str] = {}
    for text in list(auto) + list(user):
        key, sep, value = text.partition("=")
        if sep:
            merged[key] = value
        else:
            merged[text] = text
    return [key if key == value else f"{key}={value}" for key, value in merged.items()]


def display_tags(tags: Iterable[str]) -> List[str]:
    """Tags without viewer directives."""
    return [tag for tag in tags if not tag.startswith(DIRECTIVE_PREFIX)]


def directives(tags: Iterable[str], name: str) -> List[Directive]:
    found = []
    for text in tags:
        tag = parse_tag(text)
        if isinstance(tag, Directive) and tag.name == name:
            found.append(tag)
    return found


def reserved_value(tags: Iterable[str], key: str) -> str:
    """Value of the last ``key=value`` tag for a reserved key, or ``""``."""
    value = ""
    for tag in parse_tags(tags):
        if isinstance(tag, KeyValue) and tag.key == key:
            value = tag.value
    return value


@dataclass(slots=True)
class TagSection:
    key: str
    values: List[str]


def group_tags(tag_lists: Iterable[Sequence[str]]) -> List[TagSection]:
    """Build filter sections from the tags of every manual.

    The reserved sections come first in fixed order, followed by the other
    keys in lexicographic order. Bare markers collect under ``other``.
    """
    reserved: Dict[str, set] = {key: set() for key in RESERVED_KEYS}
    extra: Dict[str, set] = {}

    for tags in tag_lists:
        for tag in parse_tags(display_tags(tags)):
            if isinstance(tag, KeyValue):
                if tag.key in reserved:
                    if tag.value:
                        reserved[tag.key].add(tag.value)
                else:
                    extra.setdefault(tag.key, set()).add(tag.value)
            elif isinstance(tag, Marker):
                extra.setdefault(OTHER_SECTION, set()).add(tag.token)

    sections = [
        TagSection(key=key, values=sorted(reserved[key])) for key in RESERVED_KEYS if reserved[key]
    ]
    sections.extend(TagSection(key=key, values=sorted(extra[key])) for key in sorted(extra))
    return sections


def tag_matches(tags: Sequence[str], key: str, value: str) -> bool:
    """Whether a manual carries ``value`` for section ``key``."""
    for tag in parse_tags(display_tags(tags)):
        if isinstance(tag, KeyValue) and tag.key == key and tag.value == value:
            return True
        if isinstance(tag, Marker) and key == OTHER_SECTION and tag.token == value:
            return True
    return False
