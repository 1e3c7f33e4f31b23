"""
Central constants for the dashboard application.
"""
from __future__ import annotations

ITEMS_PER_PAGE = 6
LATEST_INVOICES_LIMIT = 5

DASHBOARD_PATH = "/dashboard"
INVOICES_PATH = "/dashboard/invoices"
CUSTOMERS_PATH = "/dashboard/customers"
LOGIN_PATH = "/login"

# Diagnostic filter used by the /query endpoint (cents).
QUERY_PROBE_AMOUNT = 666

MAX_IMAGE_BYTES = 5 * 1024 * 1024
CUSTOMER_IMAGE_PREFIX = "customers"
