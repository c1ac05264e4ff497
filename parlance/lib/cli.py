from __future__ import annotations

import enum
import pathlib
import typing as t

import click
import pydantic as p
from click import *  # noqa: F401, F403 # pyright: ignore [reportWildcardImportFromLibrary]

# Commands import this module as `click`: the stock API plus the parameter
# types below.


class EnumType(click.ParamType):
    """A parameter whose value is the `.value` of an enum member, e.g. `-E test`."""

    def __init__(self, enum: type[enum.Enum]):
        self.enum = enum
        self.name = enum.__name__

    def get_metavar(self, param: click.Parameter, *args: t.Any) -> str:
        return "[" + "|".join(str(e.value) for e in self.enum) + "]"

    def convert(
        self, value: str | enum.Enum | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> enum.Enum | None:
        if value is None or isinstance(value, self.enum):
            return value
        try:
            return self.enum(value)
        except ValueError:
            choices = ", ".join(str(e.value) for e in self.enum)
            self.fail(f"{value!r} is not one of {choices}", param, ctx)


class URIParamType(click.ParamType):
    """A URI, or a filesystem path which is turned into a `file://` URI.

    `file://` locations must exist; directories are refused unless `dir_ok`.
    """

    name = "URI OR PATH"

    def __init__(self, dir_ok: bool = False):
        self.dir_ok = dir_ok

    def convert(
        self, value: str | pathlib.Path | p.AnyUrl | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> p.AnyUrl | None:
        if value is None or isinstance(value, p.AnyUrl):
            return value

        if isinstance(value, pathlib.Path) or "://" not in value:
            path = pathlib.Path(value).absolute()
        else:
            u = p.AnyUrl(value)
            if u.scheme != "file":
                return u
            if u.path is None:
                self.fail("file URI without a path", param, ctx)
            path = pathlib.Path(u.path)

        if not path.exists():
            self.fail(f"{value}: no such file or directory", param, ctx)
        if path.is_dir() and not self.dir_ok:
            self.fail(f"{value}: is a directory", param, ctx)
        return p.FileUrl(f"file://{path}")
