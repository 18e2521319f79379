import datetime as dt
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

SECONDS_PER_DAY = 86400
_HEX_UPPER = frozenset("0123456789ABCDEF")


class ExpireWarnError(Exception):
    """Base class for every fatal condition raised by expirewarn."""


class InvalidIdentifier(ExpireWarnError, ValueError):
    pass


class ClockError(ExpireWarnError):
    pass


@dataclass(frozen=True, order=True)
class KeyId:
    """A full GPG key fingerprint: 40 uppercase hex characters, no spaces."""

    value: str

    def __post_init__(self) -> None:
        if len(self.value) != 40 or not _HEX_UPPER.issuperset(self.value):
            raise InvalidIdentifier(
                f"Key ID must be exactly 40 uppercase hex characters: {self.value!r}"
            )

    @classmethod
    def parse(cls, text: str) -> "KeyId":
        return cls(text)

    def __str__(self) -> str:
        return self.value


def current_epoch(now_fn: Optional[Callable[[], float]] = None) -> int:
    try:
        now = (now_fn or time.time)()
    except OSError as e:
        raise ClockError(f"Cannot read system clock: {e}") from e
    if now < 0:
        raise ClockError(f"System clock is before the epoch: {now}")
    return int(now)


def iso_utc(epoch: int) -> str:
    d = dt.datetime.fromtimestamp(epoch, tz=dt.timezone.utc)
    return d.isoformat().replace("+00:00", "Z")


Severity = Literal["info", "warn", "error"]

@dataclass
class Warn:
    code: str
    message: str
    severity: Severity = "warn"

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "severity": self.severity}
