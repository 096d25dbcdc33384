"""Core geometry types and the shared wire-model base."""

from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for everything that crosses the websocket.

    Fields are declared in snake_case and travel as camelCase. None values are
    left out of the payload so optional attributes read as "absent" on the
    client rather than as explicit nulls.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        kwargs.setdefault("by_alias", True)
        kwargs.setdefault("exclude_none", True)
        return super().model_dump(**kwargs)

    def model_dump_json(self, **kwargs: Any) -> str:
        kwargs.setdefault("by_alias", True)
        kwargs.setdefault("exclude_none", True)
        return super().model_dump_json(**kwargs)


class PointDict(TypedDict):
    """Dictionary representation of a point."""

    x: float
    y: float


class Point(WireModel):
    """A 2D canvas coordinate. NaN and infinities are rejected."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
