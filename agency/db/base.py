from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered with Base
from agency.models import (  # noqa: E402,F401
    client,
    payment,
    other_expense,
    team_member,
    salary_payment,
    task,
)
