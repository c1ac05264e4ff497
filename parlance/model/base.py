import enum
import typing as t

import pydantic as p


class BaseModel(p.BaseModel):
    """Models dump by alias unless asked not to, so YAML keys like `()` survive a round trip."""

    def model_dump(self, *, by_alias: bool | None = True, **kwargs: t.Any) -> dict[str, t.Any]:
        return super().model_dump(by_alias=by_alias, **kwargs)


class DeploymentEnvironment(enum.Enum):
    """Selects the `config/env.d/<env>/` overlay; `local` reads the config root alone."""

    Production = "production"
    Development = "development"
    Test = "test"
    Local = "local"
