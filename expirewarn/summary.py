from typing import Collection, List, Optional, Set

from .common import KeyId, Warn, iso_utc
from .evaluate import ExpiringKey, expire_days, select_expiring
from .extend import ExtensionCall, ExtensionResult
from .inventory import KeyInventory, KeyStatus
from .mcp_contracts import (
    ExpiringItem,
    ExpiryReport,
    ExtensionItem,
    ExtensionOutcome,
    InventorySummary,
    KeyEntry,
    MainKeyEntry,
    WarningItem,
)


def _entry_fields(status: KeyStatus, now: int) -> dict:
    return {
        "fingerprint": str(status.fingerprint),
        "expires": iso_utc(status.expires) if status.expires is not None else None,
        "days_until_expiry": expire_days(status, now),
    }


def summarize_inventory(inventory: KeyInventory, now: int) -> InventorySummary:
    return InventorySummary(
        generated_at=iso_utc(now),
        main_keys=[
            MainKeyEntry(
                **_entry_fields(main.status, now),
                subkeys=[KeyEntry(**_entry_fields(s, now)) for s in main.subkeys],
            )
            for main in inventory.main_keys
        ],
    )


def _warnings(
    inventory: KeyInventory,
    targets: Collection[KeyId],
    expiring: List[ExpiringKey],
    now: int,
) -> List[Warn]:
    warns: List[Warn] = []
    expires_at = {s.fingerprint: s.expires for s in inventory.statuses()}
    for item in expiring:
        at = expires_at[item.fingerprint]
        if at is not None and at <= now:
            warns.append(Warn("KEY_EXPIRED", f"{item.fingerprint} has expired", "error"))
        else:
            warns.append(Warn("KEY_EXPIRES_SOON", f"{item.fingerprint} expires in {item.days} days"))
    listed: Set[KeyId] = set(expires_at)
    for key in targets:
        if key not in listed:
            warns.append(Warn("KEY_NOT_LISTED", f"{key} was not found in the keyring", "info"))
    return warns


def expiry_report(
    inventory: KeyInventory,
    targets: Collection[KeyId],
    now: int,
    warn_days: int,
    expiring: Optional[List[ExpiringKey]] = None,
) -> ExpiryReport:
    if expiring is None:
        expiring = select_expiring(inventory, targets, now, warn_days)
    return ExpiryReport(
        generated_at=iso_utc(now),
        warn_days=warn_days,
        checked=[str(k) for k in targets],
        expiring=[ExpiringItem(fingerprint=str(k.fingerprint), days=k.days) for k in expiring],
        warnings=[WarningItem(**w.as_dict()) for w in _warnings(inventory, targets, expiring, now)],
    )


def _extension_item(call: ExtensionCall) -> ExtensionItem:
    return ExtensionItem(
        primary=str(call.primary),
        expire=call.expire,
        subkeys=[str(k) for k in call.subkeys],
    )


def extension_outcome(result: ExtensionResult) -> ExtensionOutcome:
    return ExtensionOutcome(
        applied=[_extension_item(c) for c in result.applied],
        failed=_extension_item(result.failed) if result.failed is not None else None,
    )
