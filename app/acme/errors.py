"""
Domain errors.

Store/transport failures are logged where they happen and re-raised as one of these with a
generic, user-facing message; the original detail never reaches the response body.
"""
from __future__ import annotations


class AcmeError(RuntimeError):
    pass


class DataFetchError(AcmeError):
    """A read for a page failed. Rendered as the list-page error boundary."""


class NotFoundError(DataFetchError):
    """A lookup by id found nothing."""


class ActionError(AcmeError):
    """A create/update/delete could not be written."""
