"""Account dataclass — connection parameters for one IMAP mailbox."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import imapstore.config as cfg
from imapstore.exceptions import InvalidArgumentError


class SslMode(str, Enum):
    NONE = ""
    SSL = "SSL"
    TLS = "TLS"

    @classmethod
    def parse(cls, value: Any) -> "SslMode":
        """Accept 'SSL', 'TLS' (any case) or a falsy value for plain IMAP."""
        if isinstance(value, SslMode):
            return value
        if not value:
            return cls.NONE
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidArgumentError(f"ssl must be 'SSL', 'TLS' or false, got {value!r}") from None


@dataclass
class Account:
    username: str = ""
    host: str = cfg.DEFAULT_HOST
    password: str = field(default="", repr=False)
    port: int | None = None     # None -> protocol default (993 / 143)
    ssl: SslMode = SslMode.NONE
    folder: str = cfg.DEFAULT_FOLDER

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "Account":
        if not params.get("user"):
            raise InvalidArgumentError("need at least user in params")
        port = params.get("port")
        try:
            port = int(port) if port is not None else None
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"invalid port {port!r}") from None
        return cls(
            username=str(params["user"]),
            host=params.get("host") or cfg.DEFAULT_HOST,
            password=params.get("password") or "",
            port=port,
            ssl=SslMode.parse(params.get("ssl", False)),
            folder=params.get("folder") or cfg.DEFAULT_FOLDER,
        )

    def __str__(self) -> str:
        return f"{self.username}@{self.host}"
