"""IMAP connection factory and LIST helpers."""
from __future__ import annotations

import logging

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

import imapstore.config as cfg
from imapstore.exceptions import IMAPConnectionError
from imapstore.models.account import Account, SslMode
from imapstore.models.folder import MailboxEntry
from imapstore.utils.keyring_store import lookup_password

logger = logging.getLogger(__name__)

# Everything the transport raises for a failed command or a broken socket.
TRANSPORT_ERRORS = (IMAPClientError, OSError)


def connect(account: Account, timeout: int | None = None) -> IMAPClient:
    """
    Create and authenticate an IMAPClient for the given account.
    The client works on sequence numbers (use_uid=False).
    Raises IMAPConnectionError on failure; no connection is left open.
    """
    if timeout is None:
        timeout = cfg.CONNECT_TIMEOUT_SECONDS
    try:
        client = IMAPClient(
            host=account.host,
            port=account.port,
            use_uid=False,
            ssl=account.ssl is SslMode.SSL,
            timeout=timeout,
        )
    except TRANSPORT_ERRORS as exc:
        raise IMAPConnectionError(f"Cannot connect to {account.host}:{account.port}: {exc}") from exc

    try:
        if account.ssl is SslMode.TLS:
            client.starttls()
        client.login(account.username, _resolve_password(account))
    except TRANSPORT_ERRORS as exc:
        _shutdown(client)
        raise IMAPConnectionError(f"cannot login, user or password wrong for {account}: {exc}") from exc

    logger.info("Authenticated %s via password", account)
    return client


def _resolve_password(account: Account) -> str:
    if account.password:
        return account.password
    return lookup_password(account) or ""


def _shutdown(client: IMAPClient) -> None:
    try:
        client.shutdown()
    except TRANSPORT_ERRORS as exc:
        logger.debug("Socket shutdown failed: %s", exc)


def _decode(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def list_mailboxes(client: IMAPClient, directory: str = "") -> dict[str, MailboxEntry]:
    """Return {global name: MailboxEntry} in server order for LIST *directory* "*"."""
    mailboxes: dict[str, MailboxEntry] = {}
    for flags, delimiter, name in client.list_folders(directory):
        mailboxes[_decode(name)] = MailboxEntry(
            delimiter=_decode(delimiter),
            flags=tuple(_decode(f) for f in flags),
        )
    return mailboxes
