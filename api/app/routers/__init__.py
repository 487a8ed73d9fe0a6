"""API Routers."""

from . import health, records, schemas

__all__ = [
    'health',
    'records',
    'schemas',
]
