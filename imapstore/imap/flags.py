"""Translation between IMAP flag tokens and domain Flag values."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from imapstore.models.message import Flag, FlagSet, as_flag

# FETCH FLAGS token -> domain flag.  \Recent is server-managed and is
# returned unchanged by to_domain.
KNOWN_FLAGS: Mapping[str, Flag] = MappingProxyType({
    "\\Passed": Flag.PASSED,
    "\\Answered": Flag.ANSWERED,
    "\\Seen": Flag.SEEN,
    "\\Deleted": Flag.DELETED,
    "\\Draft": Flag.DRAFT,
    "\\Flagged": Flag.FLAGGED,
})

# domain flag token -> SEARCH key
SEARCH_FLAGS: Mapping[str, str] = MappingProxyType({
    "\\Recent": "RECENT",
    "\\Answered": "ANSWERED",
    "\\Seen": "SEEN",
    "\\Deleted": "DELETED",
    "\\Draft": "DRAFT",
    "\\Flagged": "FLAGGED",
})


def _text(token: bytes | str) -> str:
    if isinstance(token, bytes):
        return token.decode("utf-8", errors="replace")
    return str(token)


class FlagTranslator:
    """Maps protocol flag tokens to domain flags and to SEARCH criteria."""

    def __init__(
        self,
        known_flags: Mapping[str, Flag] = KNOWN_FLAGS,
        search_flags: Mapping[str, str] = SEARCH_FLAGS,
    ) -> None:
        self._known = known_flags
        self._search = search_flags

    def to_domain(self, token: bytes | str) -> Flag | str:
        """Return the Flag for *token*, or the token itself as a keyword."""
        text = _text(token)
        return self._known.get(text, text)

    def to_flag_set(self, tokens: Iterable[bytes | str]) -> FlagSet:
        return FlagSet.of(*(self.to_domain(t) for t in tokens))

    def to_protocol(self, flag: Flag | str) -> str:
        known = as_flag(flag)
        return known.value if known is not None else _text(flag)

    def to_search_criterion(self, flag: Flag | str) -> list[str]:
        """SEARCH key for one flag; unknown flags become ``KEYWORD <flag>``.

        Quoting of the keyword is left to imapclient.
        """
        token = self.to_protocol(flag)
        if token in self._search:
            return [self._search[token]]
        return ["KEYWORD", token]

    def search_criteria(self, flags: Iterable[Flag | str]) -> list[str]:
        """Concatenate criteria for several flags; IMAP ANDs them."""
        criteria: list[str] = []
        for flag in flags:
            criteria.extend(self.to_search_criterion(flag))
        return criteria

    def to_protocol_list(self, flags: Iterable[Flag | str]) -> list[str]:
        return [self.to_protocol(f) for f in flags]
