"""Tests for FlagTranslator and FlagSet."""
from __future__ import annotations

import pytest

from imapstore.imap.flags import KNOWN_FLAGS, FlagTranslator
from imapstore.models.message import Flag, FlagSet


@pytest.fixture
def translator() -> FlagTranslator:
    return FlagTranslator()


class TestToDomain:
    @pytest.mark.parametrize("token,flag", [
        (b"\\Seen", Flag.SEEN),
        (b"\\Answered", Flag.ANSWERED),
        (b"\\Deleted", Flag.DELETED),
        (b"\\Draft", Flag.DRAFT),
        (b"\\Flagged", Flag.FLAGGED),
        ("\\Passed", Flag.PASSED),
    ])
    def test_known_tokens(self, translator, token, flag):
        assert translator.to_domain(token) is flag

    def test_unknown_token_passes_through(self, translator):
        assert translator.to_domain(b"$Junk") == "$Junk"
        assert translator.to_domain("NonJunk") == "NonJunk"

    def test_recent_is_not_a_known_flag(self, translator):
        assert translator.to_domain(b"\\Recent") == "\\Recent"
        assert not isinstance(translator.to_domain(b"\\Recent"), Flag)

    def test_roundtrip_through_protocol_token(self, translator):
        for flag in KNOWN_FLAGS.values():
            assert translator.to_domain(translator.to_protocol(flag)) is flag

    def test_keyword_roundtrip(self, translator):
        assert translator.to_domain(translator.to_protocol("$Label1")) == "$Label1"

    def test_tables_are_immutable(self):
        with pytest.raises(TypeError):
            KNOWN_FLAGS["\\Seen"] = Flag.DRAFT  # type: ignore[index]


class TestSearchCriteria:
    @pytest.mark.parametrize("flag,key", [
        (Flag.RECENT, "RECENT"),
        (Flag.ANSWERED, "ANSWERED"),
        (Flag.SEEN, "SEEN"),
        (Flag.DELETED, "DELETED"),
        (Flag.DRAFT, "DRAFT"),
        (Flag.FLAGGED, "FLAGGED"),
    ])
    def test_known_flags(self, translator, flag, key):
        assert translator.to_search_criterion(flag) == [key]

    def test_plain_token_string_is_known(self, translator):
        assert translator.to_search_criterion("\\Seen") == ["SEEN"]

    def test_keyword(self, translator):
        assert translator.to_search_criterion("$Important") == ["KEYWORD", "$Important"]

    def test_passed_has_no_search_key(self, translator):
        assert translator.to_search_criterion(Flag.PASSED) == ["KEYWORD", "\\Passed"]

    def test_several_flags_are_concatenated(self, translator):
        criteria = translator.search_criteria([Flag.SEEN, "work", Flag.FLAGGED])
        assert criteria == ["SEEN", "KEYWORD", "work", "FLAGGED"]


class TestFlagSet:
    def test_from_fetch_tokens(self, translator):
        flags = translator.to_flag_set([b"\\Seen", b"\\Recent", b"$Label1"])
        assert flags.flags == {Flag.SEEN, Flag.RECENT}
        assert flags.keywords == {"$Label1"}
        assert len(flags) == 3

    def test_membership_accepts_tokens_and_members(self):
        flags = FlagSet.of(Flag.SEEN, "custom")
        assert Flag.SEEN in flags
        assert "\\Seen" in flags
        assert "custom" in flags
        assert Flag.DRAFT not in flags

    def test_iteration_yields_flags_then_keywords(self):
        flags = FlagSet.of("zz", Flag.SEEN)
        assert list(flags) == [Flag.SEEN, "zz"]

    def test_empty(self):
        assert len(FlagSet()) == 0
        assert Flag.SEEN not in FlagSet()
