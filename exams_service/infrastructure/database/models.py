"""Database models owned by this service."""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from exams_service.infrastructure.database.base import BaseModel


class Subscription(BaseModel):
    """A subscription created on behalf of an authenticated user."""

    __tablename__ = "subscription"

    creator_user_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
        doc="Identity service user that created the subscription",
    )

    subscription_kind: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Opaque kind code supplied by the caller",
    )

    max_uses: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
