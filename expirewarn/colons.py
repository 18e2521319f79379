# expirewarn/colons.py
"""
Tokenizer for the ``gpg --with-colons --fixed-list-mode`` listing format.

Every line is a record whose first field is a type tag. Only the three tags
that carry expiry information are kept; the columns those records need are
mapped to named attributes here so the rest of the package never indexes
fields by position.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .common import ExpireWarnError, InvalidIdentifier, KeyId

TAG_PRIMARY = "pub"
TAG_SUBORDINATE = "sub"
TAG_FINGERPRINT = "fpr"
RELEVANT_TAGS = frozenset({TAG_PRIMARY, TAG_SUBORDINATE, TAG_FINGERPRINT})

# Column layout, see doc/DETAILS in the GnuPG sources.
EXPIRY_COLUMN = 6
FINGERPRINT_COLUMN = 9


class StructureError(ExpireWarnError):
    """The listing does not follow the expected record layout or ordering."""


@dataclass(frozen=True)
class Record:
    line_no: int
    fields: List[str]

    @property
    def tag(self) -> str:
        return self.fields[0]

    def column(self, index: int) -> str:
        try:
            return self.fields[index]
        except IndexError:
            raise StructureError(
                f"line {self.line_no}: '{self.tag}' record has {len(self.fields)} fields, "
                f"column {index} is missing"
            ) from None


def tokenize(text: str) -> Iterator[Record]:
    for n, line in enumerate(text.splitlines(), start=1):
        yield Record(line_no=n, fields=line.split(":"))


def relevant(records: Iterable[Record]) -> Iterator[Record]:
    return (r for r in records if r.tag in RELEVANT_TAGS)


@dataclass(frozen=True)
class KeyLine:
    """A ``pub`` or ``sub`` record."""

    line_no: int
    expires: Optional[int]

    @staticmethod
    def from_record(record: Record) -> "KeyLine":
        raw = record.column(EXPIRY_COLUMN)
        if raw == "":
            expires = None
        else:
            try:
                expires = int(raw)
            except ValueError:
                raise StructureError(
                    f"line {record.line_no}: invalid expiry timestamp {raw!r}"
                ) from None
        return KeyLine(line_no=record.line_no, expires=expires)


@dataclass(frozen=True)
class FingerprintLine:
    line_no: int
    fingerprint: KeyId

    @staticmethod
    def from_record(record: Record) -> "FingerprintLine":
        raw = record.column(FINGERPRINT_COLUMN)
        try:
            fpr = KeyId.parse(raw)
        except InvalidIdentifier as e:
            raise StructureError(f"line {record.line_no}: {e}") from e
        return FingerprintLine(line_no=record.line_no, fingerprint=fpr)
