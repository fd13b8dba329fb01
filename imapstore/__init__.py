"""imapstore — folder and message access on top of an IMAP connection."""
from __future__ import annotations

from imapstore.exceptions import (
    FolderTreeError,
    IMAPConnectionError,
    InvalidArgumentError,
    MailboxError,
    MailboxRuntimeError,
    NoFolderSelectedError,
)
from imapstore.imap.session import MailboxSession
from imapstore.models.folder import Folder
from imapstore.models.message import Flag, FlagSet, MessageDescriptor

__all__ = [
    "Flag",
    "FlagSet",
    "Folder",
    "FolderTreeError",
    "IMAPConnectionError",
    "InvalidArgumentError",
    "MailboxError",
    "MailboxRuntimeError",
    "MailboxSession",
    "MessageDescriptor",
    "NoFolderSelectedError",
]
