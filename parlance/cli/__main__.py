from __future__ import annotations

import importlib
import sys
import threading
import types
from pathlib import Path

import pydantic as p

import parlance
import parlance.lib.cli as click
from parlance.core.container import ParlanceContainer
from parlance.model import DeploymentEnvironment

# subcommand groups, each in parlance.cli.<name> under an attribute of the same name
Commands: tuple[str, ...] = ("assessment", "config")
ConfigRoot = Path(parlance.__file__).resolve().parents[1] / "config"


class LazyCommands(click.Group):
    """Import a command module only when its group is invoked, and remember it for wiring."""

    loaded: list[types.ModuleType] = []

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(Commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in Commands:
            return None
        mod = importlib.import_module(f"parlance.cli.{cmd_name}")
        if mod not in self.loaded:
            self.loaded.append(mod)
        return getattr(mod, cmd_name)


@click.group(cls=LazyCommands)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=ConfigRoot, type=click.URIParamType(dir_ok=True))
@click.option("-s", "--secrets-path", default=None, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="override a configuration value, e.g. -o vendor.speech.backend=silent",
)
@click.option("-D", "--debug", is_flag=True, default=False)
@click.pass_obj
def main(
    ct: ParlanceContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    secrets_path: p.AnyUrl | None,
    override: tuple[str, ...],
    debug: bool,
):
    ParlanceContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        secrets_path=secrets_path,
        override=override,
        wiring=tuple(LazyCommands.loaded),
    )


def execute_command(*_args: str) -> None:
    threading.current_thread().name = "parlance-0"
    args = list(_args or sys.argv)
    container = ParlanceContainer()

    try:
        # program name without its path, for the usage line
        with main.make_context(Path(args[0]).name, args=args[1:]) as ctx:
            ctx.obj = container
            main.invoke(ctx)
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        sys.exit(1)
    except click.exceptions.Exit as ex:
        sys.exit(ex.exit_code)
    except click.ClickException as ex:
        ex.show()
        sys.exit(ex.exit_code)
    except Exception as ex:
        click.echo(click.style("ERROR ", fg="red") + str(ex), file=sys.stderr)
        if "-D" in args[1:] or "--debug" in args[1:]:
            import traceback

            traceback.print_exc()
        sys.exit(-1)
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    execute_command(*sys.argv)
