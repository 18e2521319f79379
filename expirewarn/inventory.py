from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

from .colons import (
    TAG_FINGERPRINT,
    TAG_PRIMARY,
    TAG_SUBORDINATE,
    FingerprintLine,
    KeyLine,
    Record,
    StructureError,
    relevant,
    tokenize,
)
from .common import KeyId

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyStatus:
    fingerprint: KeyId
    expires: Optional[int] = None


@dataclass(frozen=True)
class MainKeyStatus:
    status: KeyStatus
    subkeys: Tuple[KeyStatus, ...] = ()


@dataclass(frozen=True)
class KeyInventory:
    main_keys: Tuple[MainKeyStatus, ...] = ()

    def statuses(self) -> Iterator[KeyStatus]:
        """Every primary in listing order, followed by every subkey in listing order."""
        for main in self.main_keys:
            yield main.status
        for main in self.main_keys:
            yield from main.subkeys

    def __len__(self) -> int:
        return len(self.main_keys)


class State(enum.Enum):
    AWAITING_PRIMARY = "awaiting primary key"
    AWAITING_PRIMARY_FINGERPRINT = "awaiting primary key fingerprint"
    AWAITING_SUBORDINATE_OR_PRIMARY = "awaiting subkey or primary key"
    AWAITING_SUBORDINATE_FINGERPRINT = "awaiting subkey fingerprint"


_TERMINAL = {State.AWAITING_PRIMARY, State.AWAITING_SUBORDINATE_OR_PRIMARY}


@dataclass
class _Builder:
    state: State = State.AWAITING_PRIMARY
    pending: Optional[KeyLine] = None
    primary: Optional[KeyStatus] = None
    subkeys: List[KeyStatus] = field(default_factory=list)
    done: List[MainKeyStatus] = field(default_factory=list)

    def _fail(self, record: Record) -> StructureError:
        return StructureError(
            f"line {record.line_no}: unexpected '{record.tag}' record while {self.state.value}"
        )

    def _close_primary(self) -> None:
        if self.primary is not None:
            self.done.append(MainKeyStatus(status=self.primary, subkeys=tuple(self.subkeys)))
        self.primary = None
        self.subkeys = []

    def _complete(self, record: Record) -> KeyStatus:
        assert self.pending is not None
        fpr = FingerprintLine.from_record(record)
        status = KeyStatus(fingerprint=fpr.fingerprint, expires=self.pending.expires)
        self.pending = None
        return status

    def feed(self, record: Record) -> None:
        tag, state = record.tag, self.state

        if tag == TAG_PRIMARY and state in _TERMINAL:
            self._close_primary()
            self.pending = KeyLine.from_record(record)
            self.state = State.AWAITING_PRIMARY_FINGERPRINT
        elif tag == TAG_SUBORDINATE and state is State.AWAITING_SUBORDINATE_OR_PRIMARY:
            self.pending = KeyLine.from_record(record)
            self.state = State.AWAITING_SUBORDINATE_FINGERPRINT
        elif tag == TAG_FINGERPRINT and state is State.AWAITING_PRIMARY_FINGERPRINT:
            self.primary = self._complete(record)
            self.state = State.AWAITING_SUBORDINATE_OR_PRIMARY
        elif tag == TAG_FINGERPRINT and state is State.AWAITING_SUBORDINATE_FINGERPRINT:
            self.subkeys.append(self._complete(record))
            self.state = State.AWAITING_SUBORDINATE_OR_PRIMARY
        else:
            raise self._fail(record)

    def finish(self) -> KeyInventory:
        if self.state not in _TERMINAL:
            raise StructureError(f"listing ended while {self.state.value}")
        self._close_primary()
        return KeyInventory(main_keys=tuple(self.done))


def build_inventory(records: Iterable[Record]) -> KeyInventory:
    """
    Group the ``pub``/``sub``/``fpr`` records into primary keys owning their subkeys.

    Records with other tags are ignored. Any deviation from
    ``(pub fpr (sub fpr)*)*`` raises StructureError and nothing is returned.
    """
    builder = _Builder()
    for record in relevant(records):
        builder.feed(record)
    inventory = builder.finish()
    log.debug(
        "parsed %d primary keys, %d subkeys",
        len(inventory),
        sum(len(m.subkeys) for m in inventory.main_keys),
    )
    return inventory


def parse_listing(text: str) -> KeyInventory:
    return build_inventory(tokenize(text))
