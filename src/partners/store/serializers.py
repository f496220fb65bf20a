"""Serialization helpers between domain models and store rows.

Decimal values are stored as strings so no precision is lost; enums are
stored by value.  Two entities need reshaping: ``Influencer`` keeps its
social handles as a JSON column, and ``VideoSubmission`` flattens its
``LinkTarget`` into ``link_kind`` plus one of two nullable foreign keys.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from partners.domain.models import Influencer, VideoSubmission


class _DecimalEncoder(json.JSONEncoder):
    """JSON encoder that converts Decimal values to strings."""

    def default(self, o: object) -> Any:
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


M = TypeVar("M", bound=BaseModel)


def serialize_payload(payload: Mapping[str, Any]) -> str:
    """JSON-encode a payload dict, converting Decimals and enums to strings."""
    return json.dumps(dict(payload), cls=_DecimalEncoder)


def to_db_value(value: Any) -> Any:
    """Convert a Python value into something sqlite3 can bind.

    Args:
        value: A plain value, Decimal, enum, or pydantic model.

    Returns:
        The value in its stored representation.
    """
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    return value


def entity_to_row(entity: BaseModel) -> dict[str, Any]:
    """Flatten a domain entity into a column -> value mapping.

    Args:
        entity: Any stored domain model.

    Returns:
        A dict keyed by column name, ready for an INSERT.
    """
    row: dict[str, Any] = entity.model_dump(mode="json")

    if isinstance(entity, Influencer):
        row["social_media_handles"] = json.dumps(row["social_media_handles"])

    if isinstance(entity, VideoSubmission):
        link = row.pop("link")
        row["link_kind"] = link["kind"]
        row["task_assignment_id"] = link.get("task_assignment_id")
        row["campaign_id"] = link.get("campaign_id")

    return row


def row_to_entity(model: type[M], row: Mapping[str, Any]) -> M:
    """Rebuild a domain entity from a stored row.

    Args:
        model: The pydantic model class to construct.
        row: A ``sqlite3.Row`` or dict keyed by column name.

    Returns:
        A validated instance of *model*.
    """
    data = dict(row)

    if model is Influencer:
        data["social_media_handles"] = json.loads(data["social_media_handles"] or "{}")

    if model is VideoSubmission:
        kind = data.pop("link_kind")
        task_assignment_id = data.pop("task_assignment_id")
        campaign_id = data.pop("campaign_id")
        if kind == "task":
            data["link"] = {"kind": kind, "task_assignment_id": task_assignment_id}
        elif kind == "campaign":
            data["link"] = {"kind": kind, "campaign_id": campaign_id}
        else:
            data["link"] = {"kind": "none"}

    return model.model_validate(data)
