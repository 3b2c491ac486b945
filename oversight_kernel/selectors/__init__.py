"""Selectors for the oversight kernel (read side)."""

from oversight_kernel.selectors.ledger_selector import LedgerSelector
from oversight_kernel.selectors.progress_selector import ProgressSelector

__all__ = [
    "LedgerSelector",
    "ProgressSelector",
]
