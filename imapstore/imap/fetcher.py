"""MessageFetcher — turns FETCH responses into message and part data.

All identifiers are sequence numbers in the folder currently selected on
the client; the caller is responsible for having one selected.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, BinaryIO

from imapclient import IMAPClient

import imapstore.config as cfg
from imapstore.exceptions import MailboxRuntimeError
from imapstore.imap.flags import FlagTranslator
from imapstore.models.message import MessageDescriptor

logger = logging.getLogger(__name__)

ALL_MESSAGES = "1:*"

# IMAP fetch items
MESSAGE_ITEMS = ["FLAGS", "RFC822.HEADER", "UID", "BODYSTRUCTURE"]


def _key(item: str) -> bytes:
    return item.encode("ascii")


def is_nil(value: Any) -> bool:
    """True for a part the server reported as absent."""
    if value is None:
        return True
    if isinstance(value, (bytes, str)):
        text = value.decode("ascii", errors="replace") if isinstance(value, bytes) else value
        return text.strip().upper() == "NIL"
    return False


class MessageFetcher:
    def __init__(self, client: IMAPClient, translator: FlagTranslator | None = None) -> None:
        self._client = client
        self._translator = translator or FlagTranslator()

    # ── helpers ───────────────────────────────────────────────────────────────

    def _fetch_one(self, msg_id: int, items: list[str]) -> dict:
        data = self._client.fetch([msg_id], items)
        if msg_id not in data:
            raise MailboxRuntimeError(f"message {msg_id} not found in selected folder")
        return data[msg_id]

    def _fetch_item(self, msg_id: int | None, item: str) -> Any:
        """One item for one message, or {seq: value} for every message."""
        if msg_id:
            return self._fetch_one(msg_id, [item]).get(_key(item))
        data = self._client.fetch(ALL_MESSAGES, [item])
        return {seq: values.get(_key(item)) for seq, values in data.items()}

    # ── single items ──────────────────────────────────────────────────────────

    def fetch_size(self, msg_id: int | None = None) -> int | dict[int, int]:
        return self._fetch_item(msg_id, "RFC822.SIZE")

    def fetch_unique_id(self, msg_id: int | None = None) -> int | dict[int, int]:
        return self._fetch_item(msg_id, "UID")

    def fetch_bodystructure(self, msg_id: int | None = None) -> Any:
        return self._fetch_item(msg_id, "BODYSTRUCTURE")

    # ── messages ──────────────────────────────────────────────────────────────

    def fetch_message(self, ids: int | Iterable[int]) -> MessageDescriptor | dict[int, MessageDescriptor]:
        """
        Fetch flags, header, UID and body structure in a single FETCH.
        Returns one descriptor for an int, else {id: descriptor} in input order.
        """
        single = isinstance(ids, int)
        wanted = [ids] if single else list(ids)
        data = self._client.fetch(wanted, MESSAGE_ITEMS)
        logger.debug("Fetched %d of %d message(s)", len(data), len(wanted))

        descriptors: dict[int, MessageDescriptor] = {}
        for msg_id in wanted:
            if msg_id not in data:
                raise MailboxRuntimeError(f"message {msg_id} not found in selected folder")
            descriptors[msg_id] = self._descriptor(msg_id, data[msg_id])
        return descriptors[ids] if single else descriptors

    def _descriptor(self, msg_id: int, data: dict) -> MessageDescriptor:
        return MessageDescriptor(
            id=msg_id,
            uid=data.get(b"UID", msg_id),
            flags=self._translator.to_flag_set(data.get(b"FLAGS", ())),
            raw_header=data.get(b"RFC822.HEADER") or b"",
            body_structure=data.get(b"BODYSTRUCTURE"),
        )

    def fetch_parts(self, msg_id: int, part: str | None = None) -> list[bytes]:
        """
        Collect the header (or, failing that, the MIME header) of each child
        part below *part*, or of the top-level parts.  Probing stops at the
        first index with neither, and never goes past PART_SCAN_LIMIT - 1.
        """
        prefix = f"{part}." if part else ""
        parts: list[bytes] = []
        for index in range(1, cfg.PART_SCAN_LIMIT):
            header_item = f"BODY[{prefix}{index}.HEADER]"
            mime_item = f"BODY[{prefix}{index}.MIME]"
            data = self._client.fetch([msg_id], [header_item, mime_item]).get(msg_id, {})
            header = data.get(_key(header_item))
            mime = data.get(_key(mime_item))
            if not is_nil(header):
                parts.append(header)
            elif not is_nil(mime):
                parts.append(mime)
            else:
                break
        return parts

    # ── raw bytes ─────────────────────────────────────────────────────────────

    def fetch_raw_header(self, msg_id: int, part: str | None = None) -> bytes:
        if part is not None:
            # TODO: fetch BODY[<part>.HEADER] once sub-part headers are needed
            raise MailboxRuntimeError("not implemented")
        return self._fetch_one(msg_id, ["RFC822.HEADER"]).get(b"RFC822.HEADER") or b""

    def fetch_raw_content(self, msg_id: int, part: str | None = None, whole_part: bool = False) -> bytes:
        """Message body without headers, or the body of *part*.

        For a part, ``whole_part`` fetches BODY[<part>] instead of BODY[<part>.TEXT].
        """
        if part is None:
            item = "RFC822.TEXT"
        elif whole_part:
            item = f"BODY[{part}]"
        else:
            item = f"BODY[{part}.TEXT]"
        return self._fetch_one(msg_id, [item]).get(_key(item)) or b""

    def download_attachment(self, msg_id: int, part: str, sink: BinaryIO) -> int:
        """Write the raw, still transfer-encoded bytes of BODY[<part>] into *sink*.

        The whole part is held in memory before anything is written:
        imapclient returns FETCH literals as complete bytes objects and
        cannot stream them.  Returns the number of bytes written.  The sink
        is flushed but not closed; it belongs to the caller.
        """
        item = f"BODY[{part}]"
        try:
            payload = self._fetch_one(msg_id, [item]).get(_key(item))
            if is_nil(payload):
                raise MailboxRuntimeError(f"message {msg_id} has no part {part}")
            sink.write(payload)
            logger.debug("Wrote %d bytes of part %s of message %d", len(payload), part, msg_id)
            return len(payload)
        finally:
            sink.flush()
