"""The service's route table.

Routes are matched in the order listed here.
"""

from typing import Any

from exams_service.api import handlers
from exams_service.api.dispatch import HandlerBinding

ROUTES: tuple[HandlerBinding[Any, Any], ...] = (
    HandlerBinding.bind("/public/test/test", handlers.subscription_new),
    HandlerBinding.bind("/public/test/test2", handlers.subscription_new),
)
