from expirewarn.evaluate import ExpiringKey
from expirewarn.extend import ExtensionCall, ExtensionResult
from expirewarn.inventory import parse_listing
from expirewarn.summary import expiry_report, extension_outcome, summarize_inventory

from _util import DAY, NOW, fp, fpr, listing, pub, sub


def _inventory():
    return parse_listing(listing(pub(NOW - 1), fpr(fp("A")), sub(NOW + 3 * DAY), fpr(fp("B"))))


def test_expired_and_soon_warnings():
    report = expiry_report(_inventory(), [fp("A"), fp("B"), fp("C")], NOW, 5)
    assert [(e.fingerprint, e.days) for e in report.expiring] == [(str(fp("A")), 0), (str(fp("B")), 3)]
    assert [(w.code, w.severity) for w in report.warnings] == [
        ("KEY_EXPIRED", "error"),
        ("KEY_EXPIRES_SOON", "warn"),
        ("KEY_NOT_LISTED", "info"),
    ]
    assert report.checked == [str(fp("A")), str(fp("B")), str(fp("C"))]


def test_inventory_summary_shape():
    summary = summarize_inventory(_inventory(), NOW).model_dump()
    (main,) = summary["main_keys"]
    assert main["days_until_expiry"] == 0
    assert main["subkeys"] == [
        {"fingerprint": str(fp("B")), "expires": "2025-10-12T08:53:20Z", "days_until_expiry": 3}
    ]


def test_report_uses_given_selection():
    given = [ExpiringKey(fp("B"), 3)]
    report = expiry_report(_inventory(), [fp("A"), fp("B")], NOW, 5, expiring=given)
    assert [e.fingerprint for e in report.expiring] == [str(fp("B"))]
    assert [w.code for w in report.warnings] == ["KEY_EXPIRES_SOON"]


def test_extension_outcome():
    ok = ExtensionCall(primary=fp("A"), expire="1y")
    bad = ExtensionCall(primary=fp("A"), expire="1y", subkeys=(fp("B"),))
    outcome = extension_outcome(ExtensionResult(applied=[ok], failed=bad)).model_dump()
    assert outcome == {
        "applied": [{"primary": str(fp("A")), "expire": "1y", "subkeys": []}],
        "failed": {"primary": str(fp("A")), "expire": "1y", "subkeys": [str(fp("B"))]},
    }
