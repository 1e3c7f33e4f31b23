"""
Invoices module.

Scope:
- Searchable, paginated invoice table (6 rows per page)
- Create / edit / delete through validated form actions
- Amounts are stored as integer cents and formatted only when read for display
"""
