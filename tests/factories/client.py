"""
Client factory for test data generation.
"""

import factory
from factory import fuzzy
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession

from agency.models.client import Client


TWO_TIER_PLAN = [
    {"duration_months": 3, "payment_type": "monthly", "services": {"instagram": 5000, "reels": 3000}},
    {"duration_months": 6, "payment_type": "monthly", "services": {"instagram": 7000, "reels": 4000}},
]
FINAL_SERVICES = {"instagram": 9000, "reels": 5000}


class ClientFactory(factory.Factory):
    """
    Factory for Client model.

    Defaults to a flat monthly client with no tiers.
    """

    class Meta:
        model = Client

    name = factory.Faker("company")
    email = factory.Faker("email")
    phone = factory.Faker("phone_number")
    company = factory.Faker("company")
    status = "active"
    payment_type = "monthly"
    monthly_rate = fuzzy.FuzzyInteger(5000, 50000)
    weekly_rate = None
    per_post_rates = factory.LazyFunction(dict)
    next_payment = None
    tiered_payments = factory.LazyFunction(list)
    final_services = factory.LazyFunction(dict)
    current_services = None
    current_rate = None
    current_tier_index = None
    created_at = factory.LazyFunction(lambda: datetime.now(timezone.utc))

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> Client:
        """
        Create client in database asynchronously.

        Args:
            db_session: AsyncSession instance
            **kwargs: Override factory attributes

        Returns:
            Client instance (flushed, not committed)
        """
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance

    @classmethod
    async def create_tiered_async(
        cls,
        db_session: AsyncSession,
        months_ago: int = 0,
        **kwargs
    ) -> Client:
        """
        Client on TWO_TIER_PLAN onboarded `months_ago` 30-day months back.

        The stored snapshot is left empty so the sweep has something to write.
        """
        kwargs.setdefault("tiered_payments", [dict(tier) for tier in TWO_TIER_PLAN])
        kwargs.setdefault("final_services", dict(FINAL_SERVICES))
        kwargs.setdefault("created_at", datetime.now(timezone.utc) - timedelta(days=30 * months_ago))
        kwargs.setdefault("monthly_rate", None)
        return await cls.create_async(db_session, **kwargs)
