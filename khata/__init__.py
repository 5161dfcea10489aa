"""
Khata - Source Package

A digital credit ledger ("khata") for a single small shop: customer
credit and payments, shop expenses, balance summaries and reports.

DESIGN PRINCIPLES:
1. Balances are always recomputed from the stored entries
2. Invalid entries are rejected before they reach the ledger
3. Storage problems never crash a screen
4. Every write is audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Khata Team"
