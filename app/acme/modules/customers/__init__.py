"""
Customers module.

Scope:
- Customer table with per-customer invoice totals (count, pending, paid)
- Create / edit / delete through validated form actions
"""
