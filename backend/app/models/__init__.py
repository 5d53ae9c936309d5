"""SQLAlchemy models for the rental marketplace.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from app.models.availability import AvailabilityOverride
from app.models.booking import Booking
from app.models.property import Property
from app.models.supervision import Supervision
from app.models.user import User, UserRole
from app.models.verification import VerificationRequest

__all__ = [
    "AvailabilityOverride",
    "Booking",
    "Property",
    "Supervision",
    "User",
    "UserRole",
    "VerificationRequest",
]
