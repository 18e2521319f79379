import os
import re
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_WARN_DAYS = 30

_SPLIT = re.compile(r"[\s,]+")


def _warn_days(raw: object, default: int = DEFAULT_WARN_DAYS) -> int:
    try:
        days = int(raw)  # type: ignore[arg-type]
        if days < 0:
            raise ValueError
    except (TypeError, ValueError):
        days = default
    return days


@dataclass(frozen=True)
class Settings:
    LOG_LEVEL: str = field(default="INFO")
    GPG_BINARY: str = field(default="gpg")
    HOMEDIR: Optional[str] = field(default=None)
    WARN_DAYS: int = field(default=DEFAULT_WARN_DAYS)
    KEYS: Tuple[str, ...] = field(default=())
    EXPIRE: Optional[str] = field(default=None)

    @staticmethod
    def from_env() -> "Settings":
        log_level = os.getenv("EXPIREWARN_LOG_LEVEL", "INFO").upper()
        keys = tuple(k for k in _SPLIT.split(os.getenv("EXPIREWARN_KEYS", "")) if k)
        return Settings(
            LOG_LEVEL=log_level,
            GPG_BINARY=os.getenv("EXPIREWARN_GPG", "gpg"),
            HOMEDIR=os.getenv("EXPIREWARN_HOMEDIR") or None,
            WARN_DAYS=_warn_days(os.getenv("EXPIREWARN_WARN_DAYS", DEFAULT_WARN_DAYS)),
            KEYS=keys,
        )

    def with_file(self, path: str | os.PathLike[str]) -> "Settings":
        """Overlay values from a TOML config file; keys absent from the file keep their value."""
        with Path(path).open("rb") as f:
            data = tomllib.load(f)

        updates: dict = {}
        if "log_level" in data:
            updates["LOG_LEVEL"] = str(data["log_level"]).upper()
        if "gpg" in data:
            updates["GPG_BINARY"] = str(data["gpg"])
        if "homedir" in data:
            updates["HOMEDIR"] = str(data["homedir"]) or None
        if "warn_days" in data:
            updates["WARN_DAYS"] = _warn_days(data["warn_days"], self.WARN_DAYS)
        if "keys" in data:
            keys = data["keys"]
            if isinstance(keys, str):
                keys = _SPLIT.split(keys)
            updates["KEYS"] = tuple(str(k) for k in keys if k)
        if "expire" in data:
            updates["EXPIRE"] = str(data["expire"]) or None
        return replace(self, **updates)

    @staticmethod
    def from_file(path: str | os.PathLike[str]) -> "Settings":
        return Settings.from_env().with_file(path)
