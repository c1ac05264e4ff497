import datetime
import inspect
import logging.config
import typing as t

from .logging import install_trace_level, TraceLogLevelLogger

TimestampProvider = t.Callable[..., datetime.datetime]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class LoggingProvider(object):
    """Applies the `logging` settings section; the container holds one as a Resource."""

    def __init__(self, config: dict[str, t.Any], debug: bool):
        install_trace_level()
        logging.config.dictConfig(config)
        if debug:
            self.capture_warnings(True)

    @staticmethod
    def get_logger(name: str | None = None, n_frames: int = 1) -> TraceLogLevelLogger:
        """Logger for `name`, or for the module `n_frames` up the stack when no name is given."""
        if name is None:
            name = inspect.stack()[n_frames].frame.f_globals["__name__"]
        return t.cast(TraceLogLevelLogger, logging.getLogger(name))

    @staticmethod
    def capture_warnings(capture: bool):
        logging.captureWarnings(capture)
