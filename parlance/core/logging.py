"""Process-wide logging setup: a TRACE level below DEBUG, installed before dictConfig runs."""

import logging
import typing as t

TRACE: t.Final[int] = 5


class TraceLogLevelLogger(logging.Logger):
    def trace(self, message: str, *args: t.Any, **kwargs: t.Any):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)


def install_trace_level() -> None:
    """Register TRACE so that YAML logging config may name it.

    Loggers created after this call are `TraceLogLevelLogger`s; module-level
    loggers created earlier can still use `logger.log(TRACE, ...)`.
    """
    logging.setLoggerClass(TraceLogLevelLogger)
    logging.addLevelName(TRACE, "TRACE")
