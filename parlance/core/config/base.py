import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from parlance.model import BaseModel


# NOTE: we use multiple inheritance so that we get our preferred model_dump
#       by_alias=True behavior from BaseModel
class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)

    model_dump = BaseModel.model_dump


class BaseSecrets(BaseSettings):
    pass
