"""
Orders services package.

- AdmissionGuard: capacity, weekday and cutoff checks run before an order exists
- OrderService: order creation and the status transition table
- ProgressionService: time-driven kitchen/delivery sweeps
- ReminderService: nudges staff who have not ordered for tomorrow
- KitchenService: today's orders grouped by meal
"""

from .admission_service import Admission, AdmissionGuard
from .dispatch import PlaceholderRiderDispatcher, get_rider_dispatcher
from .order_service import Actor, OrderService, TransitionRule, TRANSITIONS
from .progression_service import ProgressionService
from .reminder_service import ReminderService
from .kitchen_service import KitchenService

__all__ = [
    "Admission",
    "AdmissionGuard",
    "PlaceholderRiderDispatcher",
    "get_rider_dispatcher",
    "Actor",
    "OrderService",
    "TransitionRule",
    "TRANSITIONS",
    "ProgressionService",
    "ReminderService",
    "KitchenService",
]
