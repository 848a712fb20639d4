"""
Service layer.

Each module works on a SQLAlchemy session passed in by the caller, raises
errors from ``bookclub.core.exceptions`` and commits its own transaction.
Import the modules directly, e.g. ``from bookclub.services import book_service``.
"""
