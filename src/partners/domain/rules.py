"""Shared business rules: money handling, identifiers, timestamps and actor checks."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any, TypeVar

import pydantic

from partners.domain.errors import UnauthorizedError, ValidationError
from partners.domain.models import Actor, Influencer
from partners.domain.types import Role

CENTS = Decimal("0.01")

M = TypeVar("M", bound=pydantic.BaseModel)


def now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def new_id() -> str:
    """Return a new UUID4 primary key."""
    return str(uuid.uuid4())


def to_money(
    value: Decimal | str | int,
    field: str = "amount",
    error_cls: type[ValidationError] = ValidationError,
) -> Decimal:
    """Parse *value* as a monetary amount quantized to 2 places (ROUND_HALF_UP).

    Floats are refused: ``0.1 + 0.2`` style inputs are a caller bug.

    Raises:
        ValidationError: (or *error_cls*) if the value is a float, not a
            number, not finite, or too large to hold in cents.
    """
    if isinstance(value, float) or isinstance(value, bool):
        raise error_cls(f"{field} must be a Decimal, string or int, not {type(value).__name__}")
    try:
        amount = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise error_cls(f"{field} is not a valid amount: {value!r}") from None
    if not amount.is_finite():
        raise error_cls(f"{field} must be a finite amount")
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise error_cls(f"{field} is out of range: {value!r}") from None


def parse_model(model: type[M], data: M | Mapping[str, Any]) -> M:
    """Validate *data* into *model*, surfacing failures as domain ``ValidationError``."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid {model.__name__}: {problems}") from exc


def require_text(value: str | None, field: str) -> str:
    """Return *value* stripped, or raise ``ValidationError`` if it is blank."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def require_admin(actor: Actor, action: str) -> None:
    """Raise ``UnauthorizedError`` unless *actor* is an admin."""
    if not actor.is_admin:
        raise UnauthorizedError(
            f"Only admins may {action} (actor {actor.actor_id} is {actor.role})"
        )


def require_influencer_actor(actor: Actor, influencer: Influencer) -> None:
    """Raise ``UnauthorizedError`` unless *actor* is *influencer* or an admin."""
    if actor.is_admin:
        return
    if actor.role == Role.INFLUENCER and actor.actor_id == influencer.user_id:
        return
    raise UnauthorizedError(
        f"Actor {actor.actor_id} may not act for influencer {influencer.id}"
    )


def parse_deadline(deadline: str) -> date:
    """Parse an ISO 8601 date (or date-time) deadline into a date."""
    try:
        return date.fromisoformat(deadline[:10])
    except ValueError:
        raise ValidationError(f"deadline is not an ISO 8601 date: {deadline!r}") from None


def deadline_passed(deadline: str | None, today: date | None = None) -> bool:
    """Return True if *deadline* is strictly before *today* (UTC)."""
    if not deadline:
        return False
    today = today or datetime.now(tz=UTC).date()
    return parse_deadline(deadline) < today


E = TypeVar("E", bound=StrEnum)


def parse_enum(enum_cls: type[E], value: E | str, field: str) -> E:
    """Return *value* as a member of *enum_cls*, or raise ``ValidationError``."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed} (got {value!r})") from None
