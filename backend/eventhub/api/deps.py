"""
Request-scoped dependencies: store handles and the services built on them.

With STORAGE_BACKEND=sql each request gets its own AsyncSession wrapped in a
store. With STORAGE_BACKEND=memory the lifespan hook puts one in-process
store pair on app.state and every request shares it.
"""

from typing import AsyncGenerator

from fastapi import Depends, Request

from eventhub.db.session import get_sessionmaker
from eventhub.services.attendance_service import AttendanceManager
from eventhub.services.event_service import EventRegistry
from eventhub.services.user_service import UserDirectory
from eventhub.stores import EventStore, SqlEventStore, SqlUserStore, UserStore


async def get_event_store(request: Request) -> AsyncGenerator[EventStore, None]:
    memory_store = getattr(request.app.state, "event_store", None)
    if memory_store is not None:
        yield memory_store
        return
    async with get_sessionmaker()() as session:
        yield SqlEventStore(session)


async def get_user_store(request: Request) -> AsyncGenerator[UserStore, None]:
    memory_store = getattr(request.app.state, "user_store", None)
    if memory_store is not None:
        yield memory_store
        return
    async with get_sessionmaker()() as session:
        yield SqlUserStore(session)


def get_event_registry(store: EventStore = Depends(get_event_store)) -> EventRegistry:
    return EventRegistry(store)


def get_attendance_manager(
    store: EventStore = Depends(get_event_store),
    registry: EventRegistry = Depends(get_event_registry),
) -> AttendanceManager:
    return AttendanceManager(store, registry)


def get_user_directory(store: UserStore = Depends(get_user_store)) -> UserDirectory:
    return UserDirectory(store)
