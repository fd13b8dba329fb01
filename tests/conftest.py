"""Shared fixtures: a mocked IMAPClient and a session bound to it."""
from __future__ import annotations

import pytest
from unittest.mock import MagicMock

from imapclient import IMAPClient

import imapstore.config as cfg
from imapstore.imap.session import MailboxSession


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's settings.json and log file out of every test."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr(cfg, "CONFIG_DIR", tmp_path / "config" / "imapstore")
    monkeypatch.setattr(cfg, "SETTINGS_PATH", tmp_path / "config" / "imapstore" / "settings.json")
    monkeypatch.setattr(cfg, "DATA_DIR", tmp_path / "data" / "imapstore")
    monkeypatch.setattr(cfg, "LOG_PATH", tmp_path / "data" / "imapstore" / "imapstore.log")
    monkeypatch.setattr(cfg, "CLI_HOST", cfg.DEFAULT_HOST)
    monkeypatch.setattr(cfg, "CLI_FOLDER", cfg.DEFAULT_FOLDER)


def make_mock_client() -> MagicMock:
    """Create a mock IMAPClient whose SELECT succeeds."""
    client = MagicMock(spec=IMAPClient)
    client.select_folder.return_value = {b"EXISTS": 3, b"UIDVALIDITY": 1}
    client.fetch.return_value = {}
    client.search.return_value = []
    return client


@pytest.fixture
def client() -> MagicMock:
    return make_mock_client()


@pytest.fixture
def session(client) -> MailboxSession:
    s = MailboxSession(client)
    client.reset_mock()
    return s


@pytest.fixture
def idle_session(client) -> MailboxSession:
    """A session that has logged out, so no folder is selected."""
    s = MailboxSession(client)
    s.close()
    client.reset_mock()
    return s
