"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import ClientFactory, PaymentFactory

    # Create client on a two-tier plan
    client = await ClientFactory.create_tiered_async(db_session)

    # Record a payment for it
    payment = await PaymentFactory.create_async(db_session, client_id=client.id)
"""

from tests.factories.client import ClientFactory
from tests.factories.payment import PaymentFactory
from tests.factories.expense import OtherExpenseFactory
from tests.factories.team_member import TeamMemberFactory, SalaryPaymentFactory
from tests.factories.task import TaskFactory

__all__ = [
    "ClientFactory",
    "PaymentFactory",
    "OtherExpenseFactory",
    "TeamMemberFactory",
    "SalaryPaymentFactory",
    "TaskFactory",
]
