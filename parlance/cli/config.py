from __future__ import annotations

import yaml

import parlance.lib.cli as click
from parlance.core import Settings
from parlance.core.container import BootConfiguration, ParlanceContainer


@click.group("config")
def config(): ...


@config.command()
@click.argument("section", required=False)
@click.pass_obj
def show(ct: ParlanceContainer, section: str | None):
    """Print the effective configuration, or one SECTION of it, as YAML."""
    bc: BootConfiguration = ParlanceContainer.boot_config(ct)
    settings = Settings(env=bc.env, root=bc.config_root, override=bc.override)
    data = settings.model_dump(mode="json", exclude={"root", "env", "override"})
    if section is not None:
        if section not in data:
            raise click.BadParameter(f"no such section: {section}", param_hint="SECTION")
        data = {section: data[section]}
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())
