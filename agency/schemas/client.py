"""
Pydantic schemas for clients and their tiered pricing.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Dict, Any, List, Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field, field_validator


ClientStatus = Literal["active", "inactive", "pending"]
PaymentType = Literal["monthly", "weekly", "per-post"]

# Money columns are Numeric(12, 2)
CENTS = Decimal("0.01")


def coerce_rates(value: Any) -> Dict[str, Decimal]:
    """
    Normalize a service -> rate mapping.

    Rates must be real numbers; strings and booleans are rejected so that
    a typo in a rate sheet fails loudly instead of being read as 0 or 1.
    Rates are rounded to cents, the precision they are stored with.
    """
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("services must be a mapping of service name to rate")

    rates = {}
    for name, rate in value.items():
        if isinstance(rate, bool) or not isinstance(rate, (int, float, Decimal)):
            raise ValueError(f"rate for service '{name}' must be numeric")
        rate = Decimal(str(rate))
        if not rate.is_finite():
            raise ValueError(f"rate for service '{name}' must be finite")
        try:
            rates[str(name)] = rate.quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValueError(f"rate for service '{name}' is out of range")
    return rates


def rates_to_json(rates: Dict[str, Decimal]) -> Dict[str, Any]:
    """Rate mapping as plain JSON numbers for JSON columns"""
    return {
        name: int(rate) if rate == rate.to_integral_value() else float(rate)
        for name, rate in rates.items()
    }


class TierDefinition(BaseModel):
    """
    One time-boxed pricing stage.

    duration_months counts from the end of the previous tier.
    """
    model_config = ConfigDict(frozen=True)

    duration_months: int = Field(..., ge=0)
    services: Dict[str, Decimal] = Field(default_factory=dict)
    payment_type: Literal["monthly", "weekly"] = "monthly"

    @field_validator("duration_months", mode="before")
    @classmethod
    def _reject_bool_duration(cls, value):
        if isinstance(value, bool):
            raise ValueError("duration_months must be a whole number of months")
        return value

    @field_validator("services", mode="before")
    @classmethod
    def _numeric_rates(cls, value):
        return coerce_rates(value)

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        return sum(self.services.values(), Decimal("0"))

    def to_record(self) -> Dict[str, Any]:
        """JSON-column representation"""
        return {
            "duration_months": self.duration_months,
            "payment_type": self.payment_type,
            "services": rates_to_json(self.services),
        }


class ClientBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    company_address: Optional[str] = None
    gst_number: Optional[str] = Field(None, max_length=50)
    poc_phone: Optional[str] = Field(None, max_length=50)
    status: ClientStatus = "active"
    payment_type: PaymentType = "monthly"
    monthly_rate: Optional[Decimal] = Field(None, ge=0)
    weekly_rate: Optional[Decimal] = Field(None, ge=0)
    per_post_rates: Dict[str, Decimal] = Field(default_factory=dict)
    next_payment: Optional[date] = None
    notes: Optional[str] = None


class ClientCreate(ClientBase):
    """Schema for onboarding a client"""
    tiered_payments: List[TierDefinition] = Field(default_factory=list)
    final_services: Dict[str, Decimal] = Field(default_factory=dict)

    @field_validator("final_services", "per_post_rates", mode="before")
    @classmethod
    def _numeric_rates(cls, value):
        return coerce_rates(value)


class ClientUpdate(BaseModel):
    """
    Schema for updating a client.

    The current_* snapshot is owned by the tier resolver and is rejected here.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    company_address: Optional[str] = None
    gst_number: Optional[str] = Field(None, max_length=50)
    poc_phone: Optional[str] = Field(None, max_length=50)
    status: Optional[ClientStatus] = None
    payment_type: Optional[PaymentType] = None
    monthly_rate: Optional[Decimal] = Field(None, ge=0)
    weekly_rate: Optional[Decimal] = Field(None, ge=0)
    per_post_rates: Optional[Dict[str, Decimal]] = None
    next_payment: Optional[date] = None
    notes: Optional[str] = None
    tiered_payments: Optional[List[TierDefinition]] = None
    final_services: Optional[Dict[str, Decimal]] = None

    @field_validator("name", "email", "status", "payment_type")
    @classmethod
    def _not_null(cls, value):
        # Optional only so the field can be left out; the columns are NOT NULL
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value

    @field_validator("final_services", "per_post_rates", mode="before")
    @classmethod
    def _numeric_rates(cls, value):
        if value is None:
            return None
        return coerce_rates(value)


class ClientOut(BaseModel):
    """Schema for client output"""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    company_address: Optional[str] = None
    gst_number: Optional[str] = None
    poc_phone: Optional[str] = None
    status: str
    payment_type: str
    monthly_rate: Optional[float] = None
    weekly_rate: Optional[float] = None
    per_post_rates: Optional[Dict[str, float]] = None
    next_payment: Optional[date] = None
    notes: Optional[str] = None
    tiered_payments: List[Dict[str, Any]] = Field(default_factory=list)
    final_services: Dict[str, Any] = Field(default_factory=dict)
    current_services: Optional[Dict[str, float]] = None
    current_rate: Optional[float] = None
    current_tier_index: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TierResultOut(BaseModel):
    """Live tier resolution for one client"""
    client_id: int
    months_passed: int
    tier_index: int
    is_graduated: bool
    services: Dict[str, float]
    total_amount: float
