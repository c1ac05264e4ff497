from __future__ import annotations

import os
import sys
import types
import typing as t
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import parlance
from parlance.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..di import NotReady
from ..provider import LoggingProvider, TimestampProvider, utcnow
from .assessment import AssessmentContainer
from .llm import LLMContainer
from .storage import StorageContainer
from .template import TemplateContainer


class BootConfiguration(BaseModel):
    debug: bool
    env: DeploymentEnvironment
    config_root: p.AnyUrl
    secrets_path: p.AnyUrl | None = None
    override: tuple[str, ...]


class ParlanceContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[NotReady | Path] = Object(NotReady())
    utcnow: Provider[TimestampProvider] = Object(utcnow)

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, clock=utcnow
    )
    template: Provider[TemplateContainer] = Container(TemplateContainer, config=config.template, root=root)
    llm: Provider[LLMContainer] = Container(
        LLMContainer,
        config=config.llm,
        vendor=config.vendor,
        secrets=secrets.llm,
        logging=logging,
        template=template.llm,
    )
    assessment: Provider[AssessmentContainer] = Container(
        AssessmentContainer,
        config=config.assessment,
        vendor=config.vendor,
        clock=utcnow,
        store=storage.session,
        speech=llm.speech,
        transcription=llm.transcription,
        scoring=llm.scoring,
    )

    _boot_config: Provider[BootConfiguration | NotReady] = Object(NotReady())

    @staticmethod
    def boot(
        ct: ParlanceContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.FileUrl,
        secrets_path: p.AnyUrl | None = None,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        ps = Settings(env=env, root=config_root, override=override or ())
        ct.config.from_pydantic(ps)
        if wiring:
            ct.wire(modules=wiring)
        if imported := [mod for name, mod in sys.modules.items() if name.startswith("parlance.cli.")]:
            ct.wire(modules=imported)

        logger = ct.logging().get_logger()

        for ov in ps.override:
            k, v = ov.split("=", 1)
            logger.info(
                "overriding configuration parameter",
                extra={
                    "key": k,
                    "value": v,
                },
            )

        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(parlance.__file__)).parent)
        if debug:
            ct.logging().capture_warnings(True)

        # secrets live beside the configuration unless a separate location is given
        secrets = Secrets(env=env, root=secrets_path or config_root)
        ct.secrets.from_pydantic(secrets)

        logger.debug(
            "configuration finished",
            extra={
                "config": str(config_root),
                "secrets": str(secrets_path or config_root),
            },
        )
        ct._boot_config.override(
            BootConfiguration(
                debug=debug, env=env, config_root=config_root, secrets_path=secrets_path, override=override or ()
            )
        )

    @staticmethod
    def boot_config(ct: ParlanceContainer) -> BootConfiguration:
        bc = ct._boot_config()
        if isinstance(bc, NotReady):
            raise RuntimeError("container has not been booted")
        return t.cast(BootConfiguration, bc)
