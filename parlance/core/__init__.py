__all__ = [
    "di",
    "LoggingProvider",
    "Settings",
    "Secrets",
    "TimestampProvider",
    "utcnow",
]

# containers are imported from parlance.core.container; they depend on the
# service packages, which in turn import from here

from . import di
from .config import Secrets, Settings
from .provider import LoggingProvider, TimestampProvider, utcnow
