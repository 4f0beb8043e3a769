from datetime import date, datetime, time, timedelta
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def to_wire_payload(data: Any) -> Any:
    """JSON-ready body with camelCase top-level keys."""
    if isinstance(data, CamelModel):
        return data.to_wire()
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, dict):
        return {(to_camel(key) if "_" in key else key): value for key, value in to_jsonable_python(data).items()}
    return to_jsonable_python(data)


class Entity(CamelModel):
    """Stored records are replaced, never mutated in place."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def hours_between(start: time, end: time) -> float:
    """Length of a shift in hours; an end at or before the start crosses midnight."""
    anchor = date(2000, 1, 1)
    begin = datetime.combine(anchor, start)
    finish = datetime.combine(anchor, end)
    if finish <= begin:
        finish += timedelta(days=1)
    return round((finish - begin).total_seconds() / 3600, 2)


def inclusive_days(start: date, end: date) -> int:
    if end < start:
        return 0
    return (end - start).days + 1
