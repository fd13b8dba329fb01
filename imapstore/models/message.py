"""Message descriptors and flag values returned by a fetch."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Flag(str, Enum):
    """Known message flags; the value is the IMAP system flag token."""
    PASSED = "\\Passed"
    ANSWERED = "\\Answered"
    SEEN = "\\Seen"
    DELETED = "\\Deleted"
    DRAFT = "\\Draft"
    FLAGGED = "\\Flagged"
    RECENT = "\\Recent"

    def __str__(self) -> str:
        return self.value


def as_flag(value: Any) -> Flag | None:
    """Return the Flag whose token equals *value*, or None for keywords."""
    if isinstance(value, Flag):
        return value
    try:
        return Flag(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class FlagSet:
    """Known flags plus arbitrary keywords the server reported."""
    flags: frozenset[Flag] = field(default_factory=frozenset)
    keywords: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, *values: Flag | str) -> "FlagSet":
        flags: set[Flag] = set()
        keywords: set[str] = set()
        for value in values:
            known = as_flag(value)
            if known is not None:
                flags.add(known)
            else:
                keywords.add(str(value))
        return cls(frozenset(flags), frozenset(keywords))

    def __contains__(self, item: object) -> bool:
        known = as_flag(item)
        if known is not None:
            return known in self.flags
        return item in self.keywords

    def __iter__(self) -> Iterator[Flag | str]:
        yield from sorted(self.flags, key=lambda f: f.value)
        yield from sorted(self.keywords)

    def __len__(self) -> int:
        return len(self.flags) + len(self.keywords)


@dataclass
class MessageDescriptor:
    id: int                     # sequence number, only valid until the next expunge
    uid: int
    flags: FlagSet = field(default_factory=FlagSet)
    raw_header: bytes = b""
    body_structure: Any = None  # imapclient BodyData, left undecoded

    @property
    def seen(self) -> bool:
        return Flag.SEEN in self.flags
