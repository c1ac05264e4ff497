"""JSON encoding for the values that appear in reports, prompts and log extras."""

from __future__ import annotations

import base64
import datetime
import enum
import json as pyjson
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


def encode_bytes(obj: bytes) -> str:
    return base64.b64encode(obj).decode("utf8")


def encode_set(obj: set[t.Any] | frozenset[t.Any]) -> list[t.Any]:
    return list(obj)


def encode_datetime(obj: datetime.date) -> str:
    return obj.isoformat()


def encode_enum(obj: enum.Enum) -> t.Any:
    return obj.value


def encode_timedelta(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


class JSONEncoder(pyjson.JSONEncoder):
    """Encoder used everywhere in the project; subclasses override `get_encoders` to change a type."""

    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        # datetime.datetime is a datetime.date, so one entry covers both
        return {
            bytes: encode_bytes,
            datetime.date: encode_datetime,
            datetime.timedelta: encode_timedelta,
            enum.Enum: encode_enum,
            set: encode_set,
            frozenset: encode_set,
        }

    def default(self, o: t.Any) -> JSONValue:
        if isinstance(o, p.BaseModel):
            return o.model_dump(mode="json")

        for tp, encoder in self.get_encoders().items():
            if isinstance(o, tp):
                return encoder(o)

        return super().default(o)


def dumps(obj: t.Any, *, cls: type[pyjson.JSONEncoder] = JSONEncoder, **kw: t.Any) -> str:
    """`json.dumps` with the project encoder; this is also the `tojson` filter of prompt templates."""
    return pyjson.dumps(obj, cls=cls, **kw)
