import inspect
import json
import logging
import string
import textwrap
import typing as t

import pydantic as p
import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from .json import JSONEncoder
from .style import LogStyle

ReservedKeys = frozenset({
    "exception",
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "id",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
    # colorlog
    "log_color",
    "reset",
})


FormatterClass = p.TypeAdapter(p.ImportString[type[logging.Formatter]])


class ExtraFormatter(logging.Formatter):
    """Wrap a base formatter and append the record's `extra=` fields as JSON.

    The JSON is syntax-highlighted with pygments when the handler's stream is a
    TTY and colors are not disabled.
    """

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None = None,
        datefmt: str | None = None,
        indent: bool | None = None,
        pyg_style: type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        no_color: bool = False,
        **kwargs: t.Any,
    ):
        if isinstance(base, str):
            base = FormatterClass.validate_python(base)
        # unset settings arrive as None; the base formatter may not accept them at all
        kwargs = {k: v for k, v in kwargs.items() if v is not None}
        self.base = base(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.indent = bool(indent)
        self.no_color = no_color
        self.handler: logging.Handler | None = None

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if "\n" in msg:
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in d.keys() - ReservedKeys}
        if not extra:
            return message

        if self.handler is None:
            # the handler is not known at construction time, so pick it up from our caller
            frame = inspect.currentframe()
            caller = frame.f_back if frame is not None else None
            if caller is not None and isinstance(caller.f_locals.get("self"), logging.Handler):
                self.handler = caller.f_locals["self"]

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), cls=JSONEncoder)
        if self.colorize:
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    @property
    def colorize(self) -> bool:
        if self.no_color:
            return False
        stream = getattr(self.handler, "stream", None)
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
