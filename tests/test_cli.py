"""Tests for the command-line front end."""
from __future__ import annotations

import json

import pytest
from unittest.mock import MagicMock, patch

import imapstore.config as cfg
from imapstore.cli import build_parser, main, print_tree, run_command
from imapstore.exceptions import IMAPConnectionError
from imapstore.models.account import SslMode
from imapstore.models.folder import Folder
from imapstore.utils.size_fmt import human_size


def sample_tree() -> Folder:
    root = Folder("/", "/", selectable=False)
    inbox = root.add_child(Folder("INBOX", "INBOX", delimiter="/"))
    inbox.add_child(Folder("Trash", "INBOX/Trash", selectable=False, delimiter="/"))
    inbox.add_child(Folder("Sent", "INBOX/Sent", delimiter="/"))
    return root


class TestPrintTree:
    def test_indents_and_marks(self, capsys):
        print_tree(sample_tree())
        assert capsys.readouterr().out.splitlines() == [
            "INBOX",
            "  Sent",
            "  Trash  (not selectable)",
        ]


class TestRunCommand:
    def test_count_with_flags(self, capsys):
        session = MagicMock()
        session.count_messages.return_value = 7
        args = build_parser().parse_args(["--username", "u", "count", "--flag", "\\Seen"])
        run_command(session, args)
        session.count_messages.assert_called_once_with(["\\Seen"])
        assert capsys.readouterr().out.strip() == "7"

    def test_sizes(self, capsys):
        session = MagicMock()
        session.fetch_size.return_value = {2: 2048, 1: 100}
        args = build_parser().parse_args(["--username", "u", "sizes"])
        run_command(session, args)
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split() == ["1", "100", "B"]
        assert lines[1].split() == ["2", "2.0", "KB"]
        assert lines[-1].split() == ["TOTAL", "2.1", "KB"]

    def test_default_is_folder_tree(self, capsys):
        session = MagicMock()
        session.get_folders.return_value = sample_tree()
        args = build_parser().parse_args(["--username", "u"])
        run_command(session, args)
        session.get_folders.assert_called_once_with(None)
        assert "INBOX" in capsys.readouterr().out


class TestMain:
    def test_connection_error_exits_1(self, capsys):
        with patch("imapstore.cli.lookup_password", return_value="pw"), \
                patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession", side_effect=IMAPConnectionError("refused")):
            with pytest.raises(SystemExit) as info:
                main(["--username", "u", "count"])
        assert info.value.code == 1
        assert "refused" in capsys.readouterr().err

    def test_stored_password_reaches_session(self):
        with patch("imapstore.cli.lookup_password", return_value="pw"), \
                patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession") as session_cls:
            main(["--username", "u", "--host", "h", "--ssl", "TLS", "count"])
        account = session_cls.call_args.args[0]
        assert (account.username, account.host, account.password) == ("u", "h", "pw")
        assert account.ssl is SslMode.TLS
        assert account.folder == "INBOX"

    def test_remember_stores_prompted_password(self):
        with patch("imapstore.cli.lookup_password", return_value=None), \
                patch("imapstore.cli.getpass.getpass", return_value="typed"), \
                patch("imapstore.cli.store_password") as store, \
                patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession"):
            main(["--username", "u", "--remember", "count"])
        account, password = store.call_args.args
        assert str(account) == "u@localhost"
        assert password == "typed"

    def test_forget(self):
        with patch("imapstore.cli.forget_password") as forget, \
                patch("imapstore.cli._setup_logging"):
            main(["--username", "u", "--host", "h", "--forget"])
        account = forget.call_args.args[0]
        assert (account.username, account.host) == ("u", "h")


class TestSaveDefaults:
    def test_writes_settings_without_connecting(self, capsys):
        with patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession") as session_cls:
            main(["--username", "u", "--host", "imap.example.com", "--folder", "Archive", "--save-defaults"])
        session_cls.assert_not_called()
        saved = json.loads(cfg.SETTINGS_PATH.read_text(encoding="utf-8"))
        assert saved == {"cli_host": "imap.example.com", "cli_folder": "Archive"}
        assert str(cfg.SETTINGS_PATH) in capsys.readouterr().out

    def test_saved_defaults_apply_to_next_run(self):
        with patch("imapstore.cli._setup_logging"):
            main(["--username", "u", "--host", "imap.example.com", "--folder", "Archive", "--save-defaults"])
        with patch("imapstore.cli.lookup_password", return_value="pw"), \
                patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession") as session_cls:
            main(["--username", "u", "count"])
        account = session_cls.call_args.args[0]
        assert account.host == "imap.example.com"
        assert account.folder == "Archive"

    def test_command_line_beats_saved_defaults(self):
        cfg.CONFIG_DIR.mkdir(parents=True)
        cfg.SETTINGS_PATH.write_text('{"cli_host": "saved.example"}', encoding="utf-8")
        with patch("imapstore.cli.lookup_password", return_value="pw"), \
                patch("imapstore.cli._setup_logging"), \
                patch("imapstore.cli.MailboxSession") as session_cls:
            main(["--username", "u", "--host", "given.example", "count"])
        assert session_cls.call_args.args[0].host == "given.example"


class TestHumanSize:
    @pytest.mark.parametrize("num,expected", [
        (0, "0 B"),
        (1023, "1023 B"),
        (1536, "1.5 KB"),
        (5 * 1024 ** 2, "5.0 MB"),
        (3 * 1024 ** 5, "3072.0 TB"),
    ])
    def test_values(self, num, expected):
        assert human_size(num) == expected
