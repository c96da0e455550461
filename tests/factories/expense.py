"""
OtherExpense factory for test data generation.
"""

import factory
from factory import fuzzy
from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession

from agency.models.other_expense import OtherExpense


class OtherExpenseFactory(factory.Factory):

    class Meta:
        model = OtherExpense

    amount = fuzzy.FuzzyInteger(100, 5000)
    expense_date = factory.LazyFunction(date.today)
    category = fuzzy.FuzzyChoice(["tools", "ads", "rent", "travel"])
    description = factory.Faker("sentence", nb_words=3)

    @classmethod
    async def create_async(
        cls,
        db_session: AsyncSession,
        **kwargs
    ) -> OtherExpense:
        instance = cls.build(**kwargs)
        db_session.add(instance)
        await db_session.flush()
        return instance
