__all__ = [
    "AssessmentContainer",
    "BootConfiguration",
    "LLMContainer",
    "ParlanceContainer",
    "StorageContainer",
    "TemplateContainer",
]

from .assessment import AssessmentContainer
from .llm import LLMContainer
from .parlance import BootConfiguration, ParlanceContainer
from .storage import StorageContainer
from .template import TemplateContainer
