"""Storage module - In-memory table store"""

from .store import TableStore

__all__ = ['TableStore']
