from typing import Annotated, List, Optional

from fastmcp import FastMCP
from pydantic import Field

from .common import KeyId, current_epoch
from .gpg import Gpg
from .inventory import parse_listing
from .settings import Settings
from .summary import expiry_report, summarize_inventory

mcp = FastMCP(
    name="ExpireWarn",
    instructions=(
        "Purpose: report when GPG keys and their subkeys are about to expire, based on the "
        "local gpg keyring. Read-only: never changes key expiry, never touches secret keys.\n\n"
        "How to call:\n"
        "- Full picture of the keyring (or some keys) → `list_key_inventory(keys=?)`.\n"
        "- Which keys need attention → `check_key_expiry(keys=[...], warn_days=?)`.\n\n"
        "Inputs: `keys` are full fingerprints, exactly 40 uppercase hex characters, no spaces. "
        "Subkey fingerprints are accepted and listed with their primary key.\n\n"
        "Outputs: ISO-8601 UTC expiry dates and whole days until expiry (truncated toward zero; "
        "null means the key never expires)."
    ),
)


def _settings() -> Settings:
    return Settings.from_env()


def _gpg() -> Gpg:
    return Gpg.from_settings(_settings())


def _parse_keys(keys: Optional[List[str]]) -> List[KeyId]:
    return [KeyId.parse(k) for k in keys or []]


@mcp.tool(description="Health check.")
def ping() -> str:
    return "pong"


@mcp.tool(
    description=(
        "List primary keys with their subkeys and expiry dates as reported by gpg. "
        "Optionally restrict to the given fingerprints."
    ),
    tags={"expirewarn", "gpg", "inventory"},
    annotations={
        "title": "List key inventory",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def list_key_inventory(
    keys: Annotated[
        Optional[List[str]],
        Field(description="Fingerprints to list. Leave null to list the whole public keyring."),
    ] = None,
) -> dict:
    targets = _parse_keys(keys)
    inventory = parse_listing(_gpg().list_keys(targets))
    return summarize_inventory(inventory, current_epoch()).model_dump()


@mcp.tool(
    description=(
        "Flag the given keys whose expiry is within `warn_days` days (already expired keys "
        "included). Keys that never expire or are not in the keyring are not flagged."
    ),
    tags={"expirewarn", "gpg", "expiry"},
    annotations={
        "title": "Check key expiry",
        "readOnlyHint": True,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
def check_key_expiry(
    keys: Annotated[
        List[str],
        Field(description="Fingerprints to check (40 uppercase hex characters each)."),
    ],
    warn_days: Annotated[
        Optional[int],
        Field(description="Warning window in days. Defaults to the server's configured value.", ge=0),
    ] = None,
) -> dict:
    targets = _parse_keys(keys)
    if warn_days is None:
        warn_days = _settings().WARN_DAYS
    inventory = parse_listing(_gpg().list_keys(targets))
    return expiry_report(inventory, targets, current_epoch(), warn_days).model_dump()


@mcp.prompt(
    name="audit_key_expiry",
    description="Check a set of GPG keys for upcoming expiry and produce a short action list.",
    tags={"expirewarn", "prompt", "audit"},
)
def audit_key_expiry(
    keys: Annotated[str, Field(description="Comma-separated fingerprints.")],
    warn_days: Annotated[int, Field(description="Warning window in days.")] = 30,
) -> str:
    key_list = ", ".join(f'"{k.strip()}"' for k in keys.split(",") if k.strip())
    return (
        "Task: Audit GPG key expiry.\n\n"
        "1) Call the MCP tool `check_key_expiry` with the following JSON arguments:\n"
        "```json\n"
        f'{{"keys": [{key_list}], "warn_days": {warn_days}}}\n'
        "```\n\n"
        "2) For every entry in `expiring`, output one line `<fingerprint>: <days> days` and say "
        "whether it is already expired (see `warnings`). Mention keys reported as KEY_NOT_LISTED.\n"
        "3) If anything is flagged, suggest `gpg --quick-set-expire <primary> <expire> [subkeys...]`.\n"
        "If the tool call fails, output ERROR: <message> and stop. Do not invent results.\n"
    )


if __name__ == "__main__":
    mcp.run()
