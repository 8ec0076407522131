"""Database infrastructure on SQLAlchemy 2.0 async.

Core components:
- **base**: Declarative base and common model fields
- **models**: The service's tables
- **repository**: Repositories running on the guarded session
- **guard**: Mutual exclusion around the single shared session
- **session**: Engine creation and connection bootstrap
"""

from exams_service.infrastructure.database.base import Base, BaseModel
from exams_service.infrastructure.database.guard import DatabaseGuard
from exams_service.infrastructure.database.models import Subscription
from exams_service.infrastructure.database.repository import (
    BaseRepository,
    SubscriptionRepository,
)
from exams_service.infrastructure.database.session import (
    connect_with_retry,
    create_database_engine,
    create_schema,
    open_database,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseGuard",
    "Subscription",
    "SubscriptionRepository",
    "connect_with_retry",
    "create_database_engine",
    "create_schema",
    "open_database",
]
