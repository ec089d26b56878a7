"""Seed demo users and sample cases for ResolveIt."""

import asyncio
from datetime import datetime, timedelta, timezone
import sys
from pathlib import Path

from sqlalchemy import select

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from resolveit.config import settings
from resolveit.db.base import engine, async_session, Base
from resolveit.db.models import (
    Case,
    CaseStatus,
    CaseType,
    Gender,
    MediationSession,
    PanelMember,
    User,
    Witness,
)


DEMO_USERS = [
    {
        "name": "Ayesha Khan",
        "age": 34,
        "gender": Gender.FEMALE.value,
        "street": "12 Lake View Road",
        "city": "Hyderabad",
        "zip_code": "500034",
        "email": "ayesha.khan@example.org",
        "phone": "9876543210",
    },
    {
        "name": "Ravi Menon",
        "age": 52,
        "gender": Gender.MALE.value,
        "street": "7 Market Street",
        "city": "Kochi",
        "zip_code": "682011",
        "email": "ravi.menon@example.org",
        "phone": "9123456780",
    },
    {
        "name": "Sam Fernandes",
        "age": 28,
        "gender": Gender.OTHER.value,
        "street": "3 Church Lane",
        "city": "Panaji",
        "zip_code": "403001",
        "email": "sam.fernandes@example.org",
        "phone": "9988776655",
    },
]


async def seed():
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        try:
            # Seed users, skipping any that already exist
            users = {}
            for user_data in DEMO_USERS:
                result = await db.execute(
                    select(User).where(User.email == user_data["email"])
                )
                existing = result.scalar_one_or_none()
                if existing:
                    print(f"  User {user_data['name']} already exists, skipping")
                    users[user_data["email"]] = existing
                else:
                    user = User(**user_data)
                    db.add(user)
                    users[user_data["email"]] = user
                    print(f"  Created user: {user_data['name']}")

            await db.flush()

            existing_cases = await db.execute(select(Case).limit(1))
            if existing_cases.scalar_one_or_none():
                print("  Cases already exist, skipping")
                await db.commit()
                print("\nSeed complete (users added if new)!")
                return

            now = datetime.now(timezone.utc)
            deadline = now + timedelta(days=settings.RESPONSE_DEADLINE_DAYS)

            family_case = Case(
                case_type=CaseType.FAMILY.value,
                issue_description="Dispute over maintenance of the family home after the father's passing.",
                party=users["ayesha.khan@example.org"],
                opposite_party_name="Imran Khan",
                opposite_party_contact="9000011111",
                opposite_party_address="45 Old City, Hyderabad",
                opposite_party_has_accepted=True,
                opposite_party_notified_at=now,
                response_deadline=deadline,
                proof=[],
                status=CaseStatus.MEDIATION_IN_PROGRESS.value,
                witnesses=[
                    Witness(position=0, name="Farah Ali", contact="9000022222",
                            role="Neighbour", nominated_by="party"),
                ],
                panel=[
                    PanelMember(position=0, name="Adv. Meera Rao", expertise="Lawyer", contact="9000033333"),
                    PanelMember(position=1, name="Maulana Yusuf", expertise="Religious Scholar", contact="9000044444"),
                    PanelMember(position=2, name="K. Das", expertise="Community Member", contact="9000055555"),
                ],
                mediation_sessions=[
                    MediationSession(
                        position=0,
                        scheduled_at=now + timedelta(days=3),
                        status="scheduled",
                        attendees=["Ayesha Khan", "Imran Khan"],
                    ),
                ],
            )

            business_case = Case(
                case_type=CaseType.BUSINESS.value,
                issue_description="Unpaid invoices for catering supplied to a wedding hall.",
                party=users["ravi.menon@example.org"],
                opposite_party_name="Grand Hall Events",
                opposite_party_contact="accounts@grandhall.example.org",
                opposite_party_address="MG Road, Kochi",
                opposite_party_notified_at=now,
                response_deadline=deadline,
                proof=[],
                court_is_pending=True,
                court_case_number="CS-118/2026",
                court_or_police_name="Ernakulam District Court",
                status=CaseStatus.AWAITING_RESPONSE.value,
            )

            db.add_all([family_case, business_case])
            await db.commit()
            print("  Created 2 sample cases")
            print("\nSeed complete!")

        except Exception as e:
            await db.rollback()
            print(f"Seed failed: {e}")
            raise


if __name__ == "__main__":
    asyncio.run(seed())
