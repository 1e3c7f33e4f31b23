"""Dashboard overview: summary cards, revenue chart data, latest invoices."""
