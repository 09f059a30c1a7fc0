"""
Persistence layer. Services depend on the interfaces only.
"""

from .interfaces import EventStore, UserStore
from .memory_store import InMemoryEventStore, InMemoryUserStore
from .sql_store import SqlEventStore, SqlUserStore

__all__ = [
    'EventStore', 'UserStore',
    'InMemoryEventStore', 'InMemoryUserStore',
    'SqlEventStore', 'SqlUserStore',
]
