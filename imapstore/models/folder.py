"""Folder dataclass — one node of the server's mailbox hierarchy."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import NamedTuple


class MailboxEntry(NamedTuple):
    """One line of a LIST response, keyed elsewhere by global name."""
    delimiter: str
    flags: tuple[str, ...] = ()


@dataclass
class Folder:
    local_name: str
    global_name: str
    selectable: bool = True
    delimiter: str = ""
    children: dict[str, Folder] = field(default_factory=dict, repr=False)

    def add_child(self, folder: Folder) -> Folder:
        """Attach *folder*, replacing any sibling with the same local name."""
        self.children[folder.local_name] = folder
        return folder

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[Folder]:
        """Yield all descendants depth-first, each parent before its children."""
        for child in self.children.values():
            yield child
            yield from child.walk()

    def __getitem__(self, local_name: str) -> Folder:
        return self.children[local_name]

    def __contains__(self, local_name: object) -> bool:
        return local_name in self.children

    def __iter__(self) -> Iterator[Folder]:
        return iter(self.children.values())

    def __str__(self) -> str:
        return self.global_name
