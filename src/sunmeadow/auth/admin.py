"""Admin gate: a boolean flag toggled by a shared-secret comparison.

The ledger exposes delete/clear unconditionally; callers check the gate
before invoking them.
"""
from __future__ import annotations

import hmac
import logging

log = logging.getLogger("sunmeadow.auth")


class AdminAuthError(PermissionError):
    pass


class AdminGate:
    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Missing admin secret: set SUNMEADOW_ADMIN_SECRET")
        self._secret = secret.encode("utf-8")
        self.is_admin = False

    def check(self, candidate: str) -> bool:
        """Compare without changing state."""
        return hmac.compare_digest(str(candidate or "").encode("utf-8"), self._secret)

    def login(self, candidate: str) -> bool:
        self.is_admin = self.check(candidate)
        if not self.is_admin:
            log.warning("Admin login rejected")
        return self.is_admin

    def logout(self) -> None:
        self.is_admin = False

    def require(self) -> None:
        if not self.is_admin:
            raise AdminAuthError("Admin mode required")
