"""
Base for stored entities: snake_case in Python, camelCase attribute names in the store.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_item(self) -> dict:
        """Item dict as persisted (camelCase keys, JSON-compatible values)."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_item(cls, item: dict | None):
        """Build from a store item; None stays None (not found)."""
        if item is None:
            return None
        return cls.model_validate(item)

    @classmethod
    def item_values(cls, changes: dict) -> dict:
        """Translate {snake_name: value} into persisted {camelName: json value} for partial updates."""
        values = {}
        for name, value in changes.items():
            field = cls.model_fields.get(name)
            if field is None:
                raise KeyError(f"{cls.__name__} has no field {name!r}")
            values[field.alias or name] = to_jsonable_python(value)
        return values
