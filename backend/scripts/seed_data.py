"""Seed the database with a small marketplace: an admin, a host, a guest,
two listings (one per rental mode), a few bookings and a blocked day.

Run from the ``backend`` directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.auth.passwords import hash_password
from app.database import async_session_factory, create_tables, engine
from app.models.availability import AvailabilityOverride
from app.models.booking import STATUS_CONFIRMED, STATUS_PENDING, Booking
from app.models.property import RENTAL_LONG_TERM, RENTAL_SHORT_TERM, Property
from app.models.user import ROLE_ADMIN, ROLE_GUEST, ROLE_HOST, User
from app.services.booking_service import compute_total_amount
from app.services.role_service import grant_role

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

PASSWORD = "demo1234"

USERS = [
    {"phone_number": "+242060000001", "first_name": "Ada", "last_name": "Admin", "roles": [ROLE_ADMIN]},
    {"phone_number": "+242060000002", "first_name": "Henri", "last_name": "Mbemba", "roles": [ROLE_HOST]},
    {"phone_number": "+242060000003", "first_name": "Grace", "last_name": "Nkounkou", "roles": []},
]

PROPERTIES = [
    {
        "title": "Studio near the Corniche",
        "description": "Bright furnished studio, ten minutes from the river.",
        "property_type": "studio",
        "rental_type": RENTAL_SHORT_TERM,
        "max_guests": 2,
        "bedrooms": 1,
        "bathrooms": 1,
        "price_per_night": Decimal("35000.00"),
        "address": "12 avenue Amilcar Cabral",
        "city": "Brazzaville",
        "country": "Republic of Congo",
    },
    {
        "title": "Family house in Pointe-Noire",
        "description": "Three-bedroom house with a garden, for stays of a month or more.",
        "property_type": "house",
        "rental_type": RENTAL_LONG_TERM,
        "max_guests": 6,
        "bedrooms": 3,
        "bathrooms": 2,
        "price_per_month": Decimal("450000.00"),
        "address": "4 rue de la Côte Sauvage",
        "city": "Pointe-Noire",
        "country": "Republic of Congo",
    },
]


def _at_noon(day: date) -> datetime:
    return datetime.combine(day, time(12, 0))


async def seed() -> None:
    """Populate an empty database. Does nothing if the seed users already exist."""
    await create_tables()

    async with async_session_factory() as session:
        result = await session.execute(select(User).where(User.phone_number == USERS[0]["phone_number"]))
        if result.scalar_one_or_none() is not None:
            print("Seed data already present, nothing to do.")
            return

        # ------------------------------------------------------------------
        # 1. Users and roles
        # ------------------------------------------------------------------
        users: list[User] = []
        for data in USERS:
            user = User(
                phone_number=data["phone_number"],
                first_name=data["first_name"],
                last_name=data["last_name"],
                hashed_password=hash_password(PASSWORD),
            )
            session.add(user)
            await session.flush()
            for role in [ROLE_GUEST, *data["roles"]]:
                await grant_role(session, user.id, role)
            users.append(user)
            print(f"Created user {user.phone_number} ({user.first_name} {user.last_name})")

        _, host, guest = users

        # ------------------------------------------------------------------
        # 2. Listings
        # ------------------------------------------------------------------
        properties: list[Property] = []
        for data in PROPERTIES:
            prop = Property(host_id=host.id, **data)
            session.add(prop)
            await session.flush()
            properties.append(prop)
            print(f"   {prop.title} — {prop.city} ({prop.rental_type})")

        studio, house = properties

        # ------------------------------------------------------------------
        # 3. Bookings and a blocked day
        # ------------------------------------------------------------------
        today = date.today()
        stays = [
            (studio, today + timedelta(days=3), today + timedelta(days=6), STATUS_CONFIRMED),
            (studio, today + timedelta(days=10), today + timedelta(days=12), STATUS_PENDING),
            (house, today + timedelta(days=30), today + timedelta(days=90), STATUS_PENDING),
        ]
        for prop, first_day, last_day, booking_status in stays:
            check_in, check_out = _at_noon(first_day), _at_noon(last_day)
            session.add(
                Booking(
                    property_id=prop.id,
                    guest_id=guest.id,
                    check_in=check_in,
                    check_out=check_out,
                    guests_count=2,
                    rental_type=prop.rental_type,
                    total_amount=compute_total_amount(
                        prop.rental_type, prop.price_per_night, prop.price_per_month, check_in, check_out
                    ),
                    status=booking_status,
                )
            )

        session.add(AvailabilityOverride(property_id=studio.id, day=today + timedelta(days=7), available=False))

        await session.commit()

        print()
        print("=" * 60)
        print("Seed Summary")
        print("=" * 60)
        print(f"   Users:       {len(users)} (password: {PASSWORD})")
        print(f"   Properties:  {len(properties)}")
        print(f"   Bookings:    {len(stays)}")
        print("   Blocked day: 1")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
