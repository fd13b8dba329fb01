"""Rebuild the folder hierarchy from a flat LIST response."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from imapstore.exceptions import FolderTreeError, InvalidArgumentError
from imapstore.models.folder import Folder, MailboxEntry

logger = logging.getLogger(__name__)

NOSELECT = "\\noselect"


def _is_selectable(entry: MailboxEntry) -> bool:
    return not any(flag.lower() == NOSELECT for flag in entry.flags)


def _segments(global_name: str, delimiter: str) -> list[str]:
    return global_name.split(delimiter) if delimiter else [global_name]


def _local_name(global_name: str, delimiter: str) -> str:
    if not delimiter:
        return global_name
    return global_name.rsplit(delimiter, 1)[-1]


def build_folder_tree(listing: Mapping[str, MailboxEntry]) -> Folder:
    """
    Return a synthetic root ("/") holding every folder in *listing*.

    Names are sorted segment by segment so that a parent always precedes
    its descendants and every subtree is contiguous ("INBOX-old" cannot
    land between "INBOX" and "INBOX/Sent").  The current parent prefix and
    its Folder are kept on two parallel stacks; a name that does not start
    with the prefix pops back up the hierarchy until one matches.  Two
    siblings with the same local name collapse into one node, the last
    sorted wins.
    """
    if not listing:
        raise InvalidArgumentError("folder not found")

    root = Folder("/", "/", selectable=False)
    prefix_stack: list[str] = []
    folder_stack: list[Folder] = []
    prefix = ""
    parent = root

    for global_name in sorted(listing, key=lambda name: _segments(name, listing[name].delimiter)):
        entry = listing[global_name]
        folder = Folder(
            local_name=_local_name(global_name, entry.delimiter),
            global_name=global_name,
            selectable=_is_selectable(entry),
            delimiter=entry.delimiter,
        )
        if not entry.delimiter:
            # flat namespace, nothing can nest below it
            root.add_child(folder)
            continue

        while prefix and not global_name.startswith(prefix):
            if not prefix_stack:
                raise FolderTreeError(f"error while constructing folder tree at {global_name!r}")
            prefix = prefix_stack.pop()
            parent = folder_stack.pop()

        parent.add_child(folder)
        prefix_stack.append(prefix)
        folder_stack.append(parent)
        prefix = global_name + entry.delimiter
        parent = folder

    logger.debug("Built folder tree with %d folder(s)", len(listing))
    return root
