"""Request and response payloads for the subscription endpoints."""

from datetime import UTC

from pydantic import BaseModel, ConfigDict, Field

from exams_service.infrastructure.database.models import Subscription as SubscriptionRecord

# Range of the 32-bit ``subscription.subscription_kind`` column
KIND_MIN = -(2**31)
KIND_MAX = 2**31 - 1


class SubscriptionNewProps(BaseModel):
    """Body of a subscription creation request.

    Decoding is strict: ``"1"``, ``1.0`` and ``true`` are not kinds.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    api_key: str = Field(..., description="Caller's identity service API key")
    subscription_kind: int = Field(
        ...,
        ge=KIND_MIN,
        le=KIND_MAX,
        description="Kind code for the subscription",
    )


class Subscription(BaseModel):
    """A created subscription as returned to clients."""

    subscription_id: int = Field(..., examples=[42])
    creation_time: int = Field(
        ..., description="Creation time in milliseconds since the Unix epoch"
    )
    creator_user_id: int
    subscription_kind: int
    max_uses: int

    @classmethod
    def from_record(cls, record: SubscriptionRecord) -> "Subscription":
        """Build the client view of a stored subscription."""
        created_at = record.created_at
        # SQLite hands back naive UTC timestamps
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            subscription_id=record.id,
            creation_time=int(created_at.timestamp() * 1000),
            creator_user_id=record.creator_user_id,
            subscription_kind=record.subscription_kind,
            max_uses=record.max_uses,
        )
