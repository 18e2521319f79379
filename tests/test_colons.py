import pytest

from expirewarn.colons import (
    FingerprintLine,
    KeyLine,
    StructureError,
    relevant,
    tokenize,
)

from _util import ALICE, NOW, fpr, keyring_text, pub, sub


def test_tokenize_splits_lines_and_fields():
    records = list(tokenize("pub:u:255\nfpr:::x\n"))
    assert [r.tag for r in records] == ["pub", "fpr"]
    assert records[0].fields == ["pub", "u", "255"]
    assert [r.line_no for r in records] == [1, 2]


def test_relevant_keeps_only_key_records_in_order():
    tags = [r.tag for r in relevant(tokenize(keyring_text()))]
    assert tags == ["pub", "fpr", "sub", "fpr", "sub", "fpr", "pub", "fpr"]


def test_blank_lines_are_dropped():
    assert list(relevant(tokenize("\n\n"))) == []


def test_key_line_expiry_column():
    (rec,) = tokenize(pub(NOW + 5))
    line = KeyLine.from_record(rec)
    assert line.expires == NOW + 5


def test_key_line_empty_expiry_means_never():
    (rec,) = tokenize(sub(None))
    line = KeyLine.from_record(rec)
    assert line.expires is None


def test_key_line_rejects_garbage_expiry():
    (rec,) = tokenize("pub:u:255:22:0000000000000000:1:soon:")
    with pytest.raises(StructureError, match="invalid expiry"):
        KeyLine.from_record(rec)


def test_truncated_key_line_is_fatal():
    (rec,) = tokenize("pub:u:255")
    with pytest.raises(StructureError, match="column 6"):
        KeyLine.from_record(rec)


def test_fingerprint_line():
    (rec,) = tokenize(fpr(ALICE))
    assert FingerprintLine.from_record(rec).fingerprint == ALICE


def test_fingerprint_line_rejects_short_fingerprint():
    (rec,) = tokenize("fpr:::::::::0123456789ABCDEF:")
    with pytest.raises(StructureError, match="line 1"):
        FingerprintLine.from_record(rec)


def test_truncated_fingerprint_line_is_fatal():
    (rec,) = tokenize("fpr:::")
    with pytest.raises(StructureError, match="column 9"):
        FingerprintLine.from_record(rec)
