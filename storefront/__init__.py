"""Storefront checkout client: cart reconciliation, addresses and wallet checkout."""
from __future__ import annotations

__version__ = "1.0.0"
