from dataclasses import dataclass
from typing import Collection, List, Optional

from .common import SECONDS_PER_DAY, KeyId
from .inventory import KeyInventory, KeyStatus


@dataclass(frozen=True)
class ExpiringKey:
    fingerprint: KeyId
    days: int


def expire_days(status: KeyStatus, now: int) -> Optional[int]:
    """
    Whole days until ``status`` expires, or None if it never does.

    The division truncates toward zero: a key that expired less than a day
    ago reports 0, not -1.
    """
    if status.expires is None:
        return None
    delta = status.expires - now
    days = abs(delta) // SECONDS_PER_DAY
    return days if delta >= 0 else -days


def select_expiring(
    inventory: KeyInventory,
    target_ids: Collection[KeyId],
    now: int,
    warn_days: int,
) -> List[ExpiringKey]:
    targets = set(target_ids)
    out: List[ExpiringKey] = []
    for status in inventory.statuses():
        if status.fingerprint not in targets:
            continue
        days = expire_days(status, now)
        if days is not None and days <= warn_days:
            out.append(ExpiringKey(fingerprint=status.fingerprint, days=days))
    return out
