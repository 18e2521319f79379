# expirewarn/mcp_contracts.py
from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class WarningItem(BaseModel):
    code: str = Field(..., examples=["KEY_EXPIRES_SOON"])
    message: str
    severity: Literal["info", "warn", "error"] = "warn"


class KeyEntry(BaseModel):
    fingerprint: str = Field(..., min_length=40, max_length=40)
    expires: Optional[str] = Field(None, description="ISO-8601 UTC expiry, null if the key never expires")
    days_until_expiry: Optional[int] = None


class MainKeyEntry(KeyEntry):
    subkeys: List[KeyEntry] = []


class InventorySummary(BaseModel):
    generated_at: str
    main_keys: List[MainKeyEntry] = []


class ExpiringItem(BaseModel):
    fingerprint: str
    days: int


class ExtensionItem(BaseModel):
    primary: str
    expire: str
    subkeys: List[str] = []


class ExtensionOutcome(BaseModel):
    applied: List[ExtensionItem] = []
    failed: Optional[ExtensionItem] = None


class ExpiryReport(BaseModel):
    generated_at: str
    warn_days: int
    checked: List[str] = []
    expiring: List[ExpiringItem] = []
    warnings: List[WarningItem] = []
    extension: Optional[ExtensionOutcome] = None
