"""SQLAlchemy models for StayHub.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from stayhub.models.analytics import (
    BusinessAnalytics,
    HotelMetrics,
    Recommendation,
    SearchAnalytics,
    UserBehavior,
)
from stayhub.models.booking import Booking
from stayhub.models.hotel import Hotel, Room
from stayhub.models.user import User

__all__ = [
    "Booking",
    "BusinessAnalytics",
    "Hotel",
    "HotelMetrics",
    "Recommendation",
    "Room",
    "SearchAnalytics",
    "User",
    "UserBehavior",
]
