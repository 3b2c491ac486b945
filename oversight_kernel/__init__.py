"""
Oversight Kernel - contract lifecycle and progress accounting.

A transactional core for public-works contract oversight with:
- Budget additions applied atomically to the contract ledger
- Schedule modifications with suspension overlap detection
- Append-only progress reports accumulated at read time
- Typed, machine-readable errors
"""

__version__ = "0.1.0"
