"""Error taxonomy shared by every mailbox operation."""
from __future__ import annotations


class MailboxError(Exception):
    pass


class InvalidArgumentError(MailboxError, ValueError):
    """The caller passed a malformed or missing parameter."""


class MailboxRuntimeError(MailboxError, RuntimeError):
    """An operation depending on server or transport state failed."""


class NoFolderSelectedError(MailboxRuntimeError):
    def __init__(self, message: str = "no selected folder") -> None:
        super().__init__(message)


class FolderTreeError(MailboxRuntimeError):
    pass


class IMAPConnectionError(MailboxRuntimeError):
    pass
