"""Repository pattern implementation for database operations.

Repositories run against the session handed out by the ``DatabaseGuard``;
they never open sessions of their own.
"""

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from exams_service.infrastructure.database.base import BaseModel
from exams_service.infrastructure.database.models import Subscription


class BaseRepository[T: BaseModel]:
    """Base repository class providing common operations.

    Args:
        session: The async SQLAlchemy session to use for operations.
        model_class: The SQLAlchemy model class this repository manages.

    Example:
        class SubscriptionRepository(BaseRepository[Subscription]):
            def __init__(self, session: AsyncSession) -> None:
                super().__init__(session, Subscription)
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class

    async def get_by_id(self, entity_id: int) -> T | None:
        """Retrieve a model instance by its ID.

        Args:
            entity_id: The primary key ID of the model to retrieve.

        Returns:
            T | None: The model instance if found, None otherwise.
        """
        stmt = select(self.model_class).where(self.model_class.id == entity_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, obj: T) -> T:
        """Insert a new model instance.

        Args:
            obj: The model instance to create.

        Returns:
            T: The created model instance with populated ID and timestamps.
        """
        self.session.add(obj)
        await self.session.flush()

        # Refresh to get server-generated values (ID, timestamps)
        await self.session.refresh(obj)

        logger.info(
            "Created {} instance with ID: {}", self.model_class.__name__, obj.id
        )
        return obj

    async def count(self) -> int:
        """Count all instances of the model."""
        stmt = select(func.count()).select_from(self.model_class)
        result = await self.session.execute(stmt)
        return result.scalar() or 0


class SubscriptionRepository(BaseRepository[Subscription]):
    """Persistence for subscription records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Subscription)

    async def add(
        self, creator_user_id: int, subscription_kind: int, max_uses: int
    ) -> Subscription:
        """Insert a subscription and return it with server-generated fields."""
        return await self.create(
            Subscription(
                creator_user_id=creator_user_id,
                subscription_kind=subscription_kind,
                max_uses=max_uses,
            )
        )
