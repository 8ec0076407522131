"""Business handlers bound to routes by the dispatch layer."""

from sqlalchemy.exc import SQLAlchemyError

from exams_service.api.schemas.subscriptions import Subscription, SubscriptionNewProps
from exams_service.core.config import Settings
from exams_service.core.exceptions import ErrorKind, ServiceError, Severity
from exams_service.core.logging import log_event
from exams_service.infrastructure.auth.adapter import get_user_if_api_key_valid
from exams_service.infrastructure.auth.client import AuthService
from exams_service.infrastructure.database.guard import DatabaseGuard
from exams_service.infrastructure.database.repository import SubscriptionRepository

DEFAULT_MAX_USES = 1


def report_database_error(error: SQLAlchemyError) -> ServiceError:
    """Fold a persistence failure into ``InternalServerError``, logging the detail."""
    log_event(
        str(error).splitlines()[0] if str(error) else type(error).__name__,
        source=str(error.__cause__) if error.__cause__ else None,
        severity=Severity.HIGH,
    )
    return ServiceError(ErrorKind.INTERNAL_SERVER_ERROR, cause=error)


async def subscription_new(
    settings: Settings,
    database: DatabaseGuard,
    auth_service: AuthService,
    props: SubscriptionNewProps,
) -> Subscription:
    """Create a subscription owned by the caller identified by ``props.api_key``."""
    user = await get_user_if_api_key_valid(auth_service, props.api_key)

    try:
        async with database.session() as session:
            record = await SubscriptionRepository(session).add(
                user.user_id, props.subscription_kind, DEFAULT_MAX_USES
            )
            return Subscription.from_record(record)
    except SQLAlchemyError as e:
        raise report_database_error(e) from e
