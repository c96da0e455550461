"""
Tier resolution for clients on time-boxed pricing.

A client's tiers run back to back from the onboarding date. Elapsed time is
measured in whole 30-day months (truncated), a calendar-naive approximation
that callers should not mistake for calendar months: 29 days is 0 months,
day 30 is 1 month regardless of the month lengths in between.

Resolution is a pure function of its inputs; persisting the result is the
job of agency.services.tier_sweep.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from agency.core.errors import ValidationError
from agency.schemas.client import TierDefinition, coerce_rates


DAYS_PER_MONTH = 30
GRADUATED = -1

TierInput = Union[TierDefinition, Mapping[str, Any]]


@dataclass(frozen=True)
class TierResult:
    tier_index: int
    services: Dict[str, Decimal]
    total_amount: Decimal
    months_passed: int = 0
    is_graduated: bool = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "is_graduated", self.tier_index == GRADUATED)


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps from the store are UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def months_passed(created_at: datetime, now: Optional[datetime] = None) -> int:
    """
    Whole 30-day months between created_at and now, truncated.

    An evaluation time before created_at counts as 0 months.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    elapsed = now - _as_utc(created_at)
    if elapsed < timedelta(0):
        return 0
    return elapsed // timedelta(days=DAYS_PER_MONTH)


def parse_tiers(tiers: Optional[Iterable[TierInput]]) -> List[TierDefinition]:
    """
    Validate a raw tier sequence (as stored in the JSON column).

    Raises ValidationError for a missing, negative or fractional duration or
    a non-numeric rate anywhere in the sequence.
    """
    if tiers is None:
        return []
    if isinstance(tiers, (str, bytes, Mapping)):
        raise ValidationError("tiered_payments must be a list of tier definitions")

    parsed = []
    for index, tier in enumerate(tiers):
        if isinstance(tier, TierDefinition):
            parsed.append(tier)
            continue
        try:
            parsed.append(TierDefinition.model_validate(tier))
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(f"Invalid tier {index}: {problems}", tier_index=index) from e
    return parsed


def parse_rates(services: Optional[Mapping[str, Any]], label: str = "final_services") -> Dict[str, Decimal]:
    try:
        return coerce_rates(services)
    except ValueError as e:
        raise ValidationError(f"Invalid {label}: {e}") from e


def resolve_tier(
    created_at: datetime,
    tiers: Optional[Iterable[TierInput]],
    final_services: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> TierResult:
    """
    Determine the active tier for a client.

    The first tier whose cumulative duration is strictly greater than the
    months passed is active. Zero-duration tiers therefore never match.
    When no tier matches (including an empty list) the client has graduated
    and final_services apply with tier_index -1.
    """
    definitions = parse_tiers(tiers)
    final_rates = parse_rates(final_services)
    elapsed = months_passed(created_at, now)

    cumulative_duration = 0
    for index, tier in enumerate(definitions):
        cumulative_duration += tier.duration_months
        if elapsed < cumulative_duration:
            return TierResult(
                tier_index=index,
                services=dict(tier.services),
                total_amount=tier.total_amount,
                months_passed=elapsed,
            )

    return TierResult(
        tier_index=GRADUATED,
        services=final_rates,
        total_amount=sum(final_rates.values(), Decimal("0")),
        months_passed=elapsed,
    )


def snapshot_changed(
    result: TierResult,
    current_services: Optional[Mapping[str, Any]],
    current_rate: Optional[Any],
    current_tier_index: Optional[int],
) -> bool:
    """True when the stored snapshot differs from a fresh resolution"""
    if current_services is None or current_rate is None or current_tier_index is None:
        return True
    if current_tier_index != result.tier_index:
        return True
    if Decimal(str(current_rate)) != result.total_amount:
        return True
    try:
        stored = coerce_rates(current_services)
    except ValueError:
        return True
    return stored != result.services
