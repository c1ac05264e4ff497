__all__ = [
    "AssessmentSettings",
    "LLMSecrets",
    "LLMSettings",
    "LoggingSettings",
    "ModelSettings",
    "RedisSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "TemplateSettings",
    "VendorSettings",
]


from .assessment import AssessmentSettings
from .llm import LLMSettings, ModelSettings
from .logging import LoggingSettings
from .secrets import LLMSecrets, Secrets
from .settings import Settings
from .storage import RedisSettings, StorageSettings
from .template import TemplateSettings
from .vendor import VendorSettings
