"""Mailbox passwords in the system keyring.

There is one entry per login: the keyring service is ``imapstore:<host>``
with the host lower-cased, and the keyring user is the IMAP username.  A
missing or locked keyring backend is logged and reported as "no password",
so it never blocks a login whose password is given directly.
"""
from __future__ import annotations

import logging

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from imapstore.models.account import Account

logger = logging.getLogger(__name__)

SERVICE_PREFIX = "imapstore"


def service_name(host: str) -> str:
    """Keyring service for *host*; host names compare case-insensitively."""
    return f"{SERVICE_PREFIX}:{host.lower()}"


def lookup_password(account: Account) -> str | None:
    """Stored password for *account*, None when there is none or no keyring."""
    try:
        password = keyring.get_password(service_name(account.host), account.username)
    except KeyringError as exc:
        logger.warning("Cannot read the password of %s from the keyring: %s", account, exc)
        return None
    if password is None:
        logger.debug("No password stored for %s", account)
    return password


def store_password(account: Account, password: str) -> bool:
    try:
        keyring.set_password(service_name(account.host), account.username, password)
    except KeyringError as exc:
        logger.warning("Cannot store the password of %s in the keyring: %s", account, exc)
        return False
    logger.info("Stored password for %s", account)
    return True


def forget_password(account: Account) -> bool:
    """Delete the stored password.  False if nothing was stored or deletion failed."""
    try:
        keyring.delete_password(service_name(account.host), account.username)
    except PasswordDeleteError:
        logger.info("No password stored for %s", account)
        return False
    except KeyringError as exc:
        logger.warning("Cannot delete the password of %s from the keyring: %s", account, exc)
        return False
    logger.info("Forgot password for %s", account)
    return True
