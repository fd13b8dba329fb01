"""MailboxSession — folder and message operations on one IMAP connection.

The session tracks which folder is selected and refuses message, flag and
search operations until one is.  Every transport failure is re-raised as a
MailboxRuntimeError chained to the original exception.

Two operations take more than one round-trip and are not atomic:

* remove_message: STORE +FLAGS \\Deleted, then EXPUNGE.  If EXPUNGE fails
  the message stays in the folder, flagged deleted.
* move_message: COPY, then remove_message.  If the removal fails the
  message exists in both folders.

Not thread-safe; callers sharing a session must serialise access.
"""
from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, BinaryIO

from imapclient import IMAPClient

import imapstore.config as cfg
from imapstore.exceptions import MailboxRuntimeError, NoFolderSelectedError
from imapstore.imap.connection import TRANSPORT_ERRORS, connect, list_mailboxes
from imapstore.imap.fetcher import MessageFetcher
from imapstore.imap.flags import FlagTranslator
from imapstore.imap.folder_tree import build_folder_tree
from imapstore.models.account import Account
from imapstore.models.folder import Folder
from imapstore.models.message import Flag, MessageDescriptor

logger = logging.getLogger(__name__)

FolderRef = Folder | str
MessageIds = int | Iterable[int]

# Selected when the session wraps an already connected client.
INBOX = "INBOX"


def global_name(folder: FolderRef) -> str:
    """Resolve a Folder or a global name to the global name."""
    if isinstance(folder, Folder):
        return folder.global_name
    return folder


class MailboxSession:
    def __init__(
        self,
        params: Mapping[str, Any] | Account | IMAPClient,
        translator: FlagTranslator | None = None,
    ) -> None:
        """
        *params* is either a mapping of connection parameters (``user``,
        ``host``, ``password``, ``port``, ``ssl``, ``folder``), an Account,
        or an IMAPClient that is already logged in.
        """
        self._translator = translator or FlagTranslator()
        self._current_folder = ""

        if isinstance(params, IMAPClient):
            self._attach(params)
            try:
                self.select_folder(INBOX)
            except MailboxRuntimeError as exc:
                raise MailboxRuntimeError("cannot select INBOX, is this a valid transport?") from exc
            return

        account = params if isinstance(params, Account) else Account.from_params(params)
        self._attach(connect(account))
        try:
            self.select_folder(account.folder)
        except MailboxRuntimeError:
            self._logout_quietly()
            raise

    def _attach(self, client: IMAPClient) -> None:
        client.use_uid = False
        self._client = client
        self._fetcher = MessageFetcher(client, self._translator)

    def _logout_quietly(self) -> None:
        try:
            self._client.logout()
        except TRANSPORT_ERRORS as exc:
            logger.debug("Logout after failed setup raised: %s", exc)

    # ── plumbing ──────────────────────────────────────────────────────────────

    @contextlib.contextmanager
    def _transport(self, failure: str) -> Iterator[None]:
        """Re-raise transport errors as MailboxRuntimeError(*failure*)."""
        try:
            yield
        except TRANSPORT_ERRORS as exc:
            logger.error("%s: %s", failure, exc)
            raise MailboxRuntimeError(f"{failure}: {exc}") from exc

    def _require_folder(self) -> None:
        if not self._current_folder:
            raise NoFolderSelectedError()

    def __enter__(self) -> "MailboxSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.close()
            return
        # keep the error from the with-block; a failed logout is only logged
        try:
            self.close()
        except MailboxRuntimeError as close_exc:
            logger.warning("Logout after %s failed: %s", exc_type.__name__, close_exc)

    @property
    def current_folder(self) -> str:
        """Global name of the selected folder, "" when none is selected."""
        return self._current_folder

    # ── session ───────────────────────────────────────────────────────────────

    def select_folder(self, folder: FolderRef) -> dict:
        """Select *folder* (must be selectable) and return the SELECT response."""
        name = global_name(folder)
        self._current_folder = name
        try:
            data = self._client.select_folder(name)
        except TRANSPORT_ERRORS as exc:
            self._current_folder = ""
            logger.error("Cannot select %s: %s", name, exc)
            raise MailboxRuntimeError(f"cannot change folder, maybe it does not exist: {exc}") from exc
        logger.debug("Selected %s", name)
        return data

    def close(self) -> None:
        """Forget the selected folder and log out."""
        self._current_folder = ""
        with self._transport("logout failed"):
            self._client.logout()

    def close_folder(self) -> None:
        """Send CLOSE.  current_folder keeps its value; select again before relying on it."""
        with self._transport("cannot close folder"):
            self._client.close_folder()

    def noop(self) -> None:
        with self._transport("could not do nothing"):
            self._client.noop()

    # ── folders ───────────────────────────────────────────────────────────────

    def get_folders(self, root_folder: FolderRef | None = None) -> Folder:
        """Return the folder tree below *root_folder*, or of the whole account."""
        directory = global_name(root_folder) if root_folder else ""
        with self._transport("cannot list folders"):
            listing = list_mailboxes(self._client, directory)
        return build_folder_tree(listing)

    def get_flagged_folder(self, marker: str) -> str | None:
        """Global name of the first folder whose second LIST flag is *marker*."""
        with self._transport("cannot list folders"):
            listing = list_mailboxes(self._client)
        for name, entry in listing.items():
            if len(entry.flags) > 1 and entry.flags[1] == marker:
                return name
        return None

    def create_folder(self, name: str, parent: FolderRef | None = None) -> None:
        """Create *name*, below *parent* when given.

        The path is joined with FOLDER_DELIMITER, not the server's own
        hierarchy delimiter.
        """
        if isinstance(parent, Folder):
            folder = f"{parent.global_name}{cfg.FOLDER_DELIMITER}{name}"
        elif parent:
            folder = f"{parent}{cfg.FOLDER_DELIMITER}{name}"
        else:
            folder = name
        with self._transport(f"cannot create folder {folder}"):
            self._client.create_folder(folder)
        logger.info("Created folder %s", folder)

    def remove_folder(self, folder: FolderRef) -> None:
        name = global_name(folder)
        with self._transport(f"cannot delete folder {name}"):
            self._client.delete_folder(name)
        logger.info("Deleted folder %s", name)

    def rename_folder(self, old: FolderRef, new_name: str) -> None:
        name = global_name(old)
        with self._transport(f"cannot rename folder {name}"):
            self._client.rename_folder(name, new_name)
        logger.info("Renamed folder %s to %s", name, new_name)

    # ── counting / lookup ─────────────────────────────────────────────────────

    def count_messages(self, flags: Flag | str | Iterable[Flag | str] | None = None) -> int:
        """Number of messages in the selected folder, or of those carrying all *flags*."""
        self._require_folder()
        if flags is None:
            criteria = ["ALL"]
        else:
            if isinstance(flags, str):
                flags = [flags]
            criteria = self._translator.search_criteria(flags)
        with self._transport("search failed"):
            return len(self._client.search(criteria))

    def count_unseen(self, folder: FolderRef) -> int:
        """Unseen messages in *folder*.  Note: this selects *folder*."""
        self.select_folder(folder)
        with self._transport("search failed"):
            return len(self._client.search(["UNSEEN"]))

    def get_number_by_unique_id(self, uid: int | str) -> int | None:
        """Sequence number of the message with *uid*, None if there is none."""
        self._require_folder()
        with self._transport("search failed"):
            ids = self._client.search(["UID", str(uid)])
        return ids[0] if ids else None

    # ── fetching ──────────────────────────────────────────────────────────────

    def fetch_size(self, msg_id: int | None = None) -> int | dict[int, int]:
        self._require_folder()
        with self._transport("cannot fetch size"):
            return self._fetcher.fetch_size(msg_id)

    def fetch_unique_id(self, msg_id: int | None = None) -> int | dict[int, int]:
        self._require_folder()
        with self._transport("cannot fetch uid"):
            return self._fetcher.fetch_unique_id(msg_id)

    def fetch_bodystructure(self, msg_id: int | None = None) -> Any:
        self._require_folder()
        with self._transport("cannot fetch body structure"):
            return self._fetcher.fetch_bodystructure(msg_id)

    def fetch_message(self, ids: MessageIds) -> MessageDescriptor | dict[int, MessageDescriptor]:
        self._require_folder()
        with self._transport("cannot fetch message"):
            return self._fetcher.fetch_message(ids)

    def fetch_parts(self, msg_id: int, part: str | None = None) -> list[bytes]:
        self._require_folder()
        with self._transport("cannot fetch parts"):
            return self._fetcher.fetch_parts(msg_id, part)

    def fetch_raw_header(self, msg_id: int, part: str | None = None) -> bytes:
        self._require_folder()
        with self._transport("cannot fetch header"):
            return self._fetcher.fetch_raw_header(msg_id, part)

    def fetch_raw_content(self, msg_id: int, part: str | None = None, whole_part: bool = False) -> bytes:
        self._require_folder()
        with self._transport("cannot fetch content"):
            return self._fetcher.fetch_raw_content(msg_id, part, whole_part)

    def download_attachment(self, msg_id: int, part: str, sink: BinaryIO) -> int:
        self._require_folder()
        with self._transport(f"cannot download part {part}"):
            return self._fetcher.download_attachment(msg_id, part, sink)

    # ── message mutation ──────────────────────────────────────────────────────

    def remove_message(self, msg_id: MessageIds) -> None:
        self._require_folder()
        with self._transport("cannot set deleted flag"):
            self._client.add_flags(msg_id, [Flag.DELETED.value])
        with self._transport("message marked as deleted, but could not expunge"):
            self._client.expunge()
        logger.info("Removed message %s from %s", msg_id, self._current_folder)

    def copy_message(self, msg_id: MessageIds, folder: FolderRef) -> None:
        self._require_folder()
        name = global_name(folder)
        with self._transport(f"cannot copy message, does {name} exist?"):
            self._client.copy(msg_id, name)
        logger.info("Copied message %s from %s to %s", msg_id, self._current_folder, name)

    def move_message(self, msg_id: MessageIds, folder: FolderRef) -> None:
        """COPY then remove_message; see the module docstring for partial failure."""
        self.copy_message(msg_id, folder)
        self.remove_message(msg_id)

    def set_flags(self, msg_id: MessageIds, flags: Iterable[Flag | str]) -> None:
        """Replace all flags of the message.  \\Recent cannot be set."""
        self._require_folder()
        tokens = self._translator.to_protocol_list(flags)
        with self._transport("cannot set flags, have you tried to set the recent flag or special chars?"):
            self._client.set_flags(msg_id, tokens)

    def change_flag(self, msg_id: MessageIds, flag: Flag | str, value: bool) -> None:
        """Add (*value* true) or remove a single flag with a silent STORE."""
        self._require_folder()
        tokens = [self._translator.to_protocol(flag)]
        with self._transport("cannot set flags, have you tried to set the recent flag or special chars?"):
            if value:
                self._client.add_flags(msg_id, tokens, silent=True)
            else:
                self._client.remove_flags(msg_id, tokens, silent=True)

    def append_message(
        self,
        message: bytes | str,
        folder: FolderRef | None = None,
        flags: Iterable[Flag | str] | None = None,
    ) -> None:
        """Append a raw RFC 822 message, by default to the selected folder as \\Seen."""
        if folder is None:
            self._require_folder()
            folder = self._current_folder
        if flags is None:
            flags = [Flag.SEEN]
        name = global_name(folder)
        tokens = self._translator.to_protocol_list(flags)
        with self._transport("cannot create message, please check if the folder exists and your flags"):
            self._client.append(name, message, flags=tokens)
        logger.info("Appended message to %s", name)
