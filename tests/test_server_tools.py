from __future__ import annotations
import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from _util import ALICE, ALICE_ENC, ALICE_SIGN, BOB, NOW, FakeGpg, fp, keyring_text


@pytest.fixture
def fake(monkeypatch):
    from expirewarn import server

    gpg = FakeGpg(keyring_text())
    monkeypatch.setattr(server, "_gpg", lambda: gpg)
    monkeypatch.setattr(server, "current_epoch", lambda: NOW)
    monkeypatch.setenv("EXPIREWARN_WARN_DAYS", "2")
    return gpg


@pytest.mark.asyncio
async def test_server_name_and_ping():
    from expirewarn.server import mcp

    assert getattr(mcp, "name", "") == "ExpireWarn"
    async with Client(mcp) as client:
        result = await client.call_tool("ping", {})
        assert result.data == "pong"


@pytest.mark.asyncio
async def test_check_key_expiry(fake):
    from expirewarn.server import mcp

    async with Client(mcp) as client:
        res = await client.call_tool(
            "check_key_expiry",
            {"keys": [str(ALICE), str(ALICE_SIGN), str(ALICE_ENC)], "warn_days": 10},
        )
        report = res.data
        assert report["warn_days"] == 10
        assert report["expiring"] == [
            {"fingerprint": str(ALICE), "days": 10},
            {"fingerprint": str(ALICE_SIGN), "days": 1},
        ]
        assert [w["code"] for w in report["warnings"]] == ["KEY_EXPIRES_SOON", "KEY_EXPIRES_SOON"]
        assert fake.listed == [[ALICE, ALICE_SIGN, ALICE_ENC]]


@pytest.mark.asyncio
async def test_check_key_expiry_uses_configured_window(fake):
    from expirewarn.server import mcp

    async with Client(mcp) as client:
        report = (await client.call_tool("check_key_expiry", {"keys": [str(ALICE), str(ALICE_SIGN)]})).data
        assert report["warn_days"] == 2
        assert report["expiring"] == [{"fingerprint": str(ALICE_SIGN), "days": 1}]


@pytest.mark.asyncio
async def test_check_key_expiry_rejects_bad_fingerprint(fake):
    from expirewarn.server import mcp

    async with Client(mcp) as client:
        with pytest.raises(ToolError):
            await client.call_tool("check_key_expiry", {"keys": ["deadbeef"]})
    assert fake.listed == []


@pytest.mark.asyncio
async def test_list_key_inventory(fake):
    from expirewarn.server import mcp

    async with Client(mcp) as client:
        summary = (await client.call_tool("list_key_inventory", {})).data
        assert summary["generated_at"] == "2025-10-09T08:53:20Z"
        alice, bob = summary["main_keys"]
        assert alice["fingerprint"] == str(ALICE)
        assert alice["days_until_expiry"] == 10
        assert [s["fingerprint"] for s in alice["subkeys"]] == [str(ALICE_SIGN), str(ALICE_ENC)]
        assert alice["subkeys"][0]["expires"] == "2025-10-10T08:53:20Z"
        assert bob["fingerprint"] == str(BOB)
        assert bob["expires"] is None
        assert bob["days_until_expiry"] is None
        assert fake.listed == [[]]


@pytest.mark.asyncio
async def test_audit_prompt_mentions_tool():
    from expirewarn.server import mcp

    async with Client(mcp) as client:
        res = await client.get_prompt("audit_key_expiry", {"keys": f"{fp('A')}, {fp('B')}"})
        text = res.messages[0].content.text
        assert "check_key_expiry" in text
        assert f'"{fp("A")}", "{fp("B")}"' in text
        assert '"warn_days": 30' in text
