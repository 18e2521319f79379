import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from .common import KeyId
from .evaluate import ExpiringKey
from .inventory import KeyInventory

log = logging.getLogger(__name__)


class ExpirySetter(Protocol):
    def quick_set_expire(self, primary: KeyId, expire: str, subkeys: Sequence[KeyId] = ()) -> bool: ...


@dataclass(frozen=True)
class ExtensionCall:
    """One ``--quick-set-expire`` invocation. No subkeys means the primary key itself."""

    primary: KeyId
    expire: str
    subkeys: Tuple[KeyId, ...] = ()

    def describe(self) -> str:
        if self.subkeys:
            return "subkeys: " + ", ".join(str(k) for k in self.subkeys)
        return f"main key: {self.primary}"


@dataclass
class ExtensionResult:
    applied: List[ExtensionCall] = field(default_factory=list)
    failed: Optional[ExtensionCall] = None

    @property
    def ok(self) -> bool:
        return self.failed is None


def plan_extensions(
    inventory: KeyInventory,
    flagged: Iterable[ExpiringKey],
    expire: str,
) -> List[ExtensionCall]:
    flagged_ids = {k.fingerprint for k in flagged}
    calls: List[ExtensionCall] = []
    for main in inventory.main_keys:
        primary = main.status.fingerprint
        if primary in flagged_ids:
            calls.append(ExtensionCall(primary=primary, expire=expire))
        subkeys = tuple(s.fingerprint for s in main.subkeys if s.fingerprint in flagged_ids)
        if subkeys:
            calls.append(ExtensionCall(primary=primary, expire=expire, subkeys=subkeys))
    return calls


def apply_extensions(
    gpg: ExpirySetter,
    calls: Iterable[ExtensionCall],
    announce: Optional[Callable[[ExtensionCall], None]] = None,
) -> ExtensionResult:
    """Run the calls one after another, stopping at the first failure. Nothing is rolled back."""
    result = ExtensionResult()
    for call in calls:
        log.debug("Setting expiry to %s for %s", call.expire, call.describe())
        if announce is not None:
            announce(call)
        if not gpg.quick_set_expire(call.primary, call.expire, call.subkeys):
            log.error("Failed to update expiry of %s", call.describe())
            result.failed = call
            break
        result.applied.append(call)
    return result
