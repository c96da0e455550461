from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from agency.api.endpoints import clients, payments, expenses, team_members, tasks, dashboard, reminders
from agency.db.session import engine_internal_sync
from agency.db.base import Base
from agency.core.config import settings
from agency.core.errors import AggregationError, NotFoundError, ValidationError
from agency.core.logging import init_sentry, setup_logging
from agency.middleware.logging import AccessLoggingMiddleware
from agency.logging import get_logger

app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="""
## Agency Dashboard

Back office for a social-media marketing agency:

- **Clients**: contact details, flat or tiered pricing, next payment date
- **Tiered pricing**: tiers run back to back from onboarding, measured in
  30-day months; once every tier has elapsed the final rates apply. A
  background sweep keeps each client's current rate up to date.
- **Payments / Expenses / Team**: revenue, other expenses and payroll
- **Tasks**: content task board per client
- **Dashboard**: period revenue, expenses, profit margin and projected MRR,
  recent activity, revenue series and per-client payment distribution
- **Reminders**: daily email reminder for payments due tomorrow
    """,
    version="1.0.0"
)

setup_logging()
init_sentry()

Base.metadata.create_all(bind=engine_internal_sync)

logger = get_logger("agency.api")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(AccessLoggingMiddleware)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(AggregationError)
async def aggregation_error_handler(request: Request, exc: AggregationError):
    logger.error("Dashboard aggregation failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": exc.message})


app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
app.include_router(payments.router, prefix="/api/payments", tags=["payments"])
app.include_router(expenses.router, prefix="/api/expenses", tags=["expenses"])
app.include_router(team_members.router, prefix="/api/team-members", tags=["team members"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(reminders.router, prefix="/api/reminders", tags=["reminders"])


@app.get("/")
def root():
    return {"message": f"Welcome to the {settings.APP_NAME} API. See /docs for the OpenAPI schema."}


@app.get("/health")
def health():
    return {"status": "ok"}
