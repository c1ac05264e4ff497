from .base import BaseSettings


class TemplateSettings(BaseSettings):
    # relative to the directory containing the parlance package
    llm_path: str = "parlance/templates/llm"
