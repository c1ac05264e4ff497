from __future__ import annotations

import pathlib

import jinja2
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Object, Provider, ThreadSafeSingleton

import parlance.lib.json

from ..di import NotReady


def provide_llm_env(template_path: str, root: pathlib.Path | NotReady) -> jinja2.Environment:
    """Provide Jinja2 environment for LLM prompt templates.

    Prompts are not markup, so there is no autoescape; whitespace control keeps
    block tags from leaking blank lines into the rendered prompt.
    """
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(root.joinpath(template_path)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.policies.update({
        "json.dumps_function": parlance.lib.json.dumps,
    })
    return env


class TemplateContainer(DeclarativeContainer):
    config: Configuration = Configuration(strict=True)
    root: Provider[pathlib.Path | NotReady] = Object()

    llm: Provider[jinja2.Environment] = ThreadSafeSingleton(provide_llm_env, config.llm_path, root=root)
