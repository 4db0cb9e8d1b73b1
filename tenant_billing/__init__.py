"""
Tenant Billing - Source Package

A small record keeper for tenant charges (water, electricity, rent)
with single-entry forms, bulk CSV import and a live-refreshing list.

DESIGN PRINCIPLES:
1. Validate before the store, never after
2. Fail early, fail visibly
3. No silent corrections
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Tenant Billing Team"
