"""Run assessments from the command line without a voice front end."""

from __future__ import annotations

import asyncio
import pathlib
import typing as t

import pydantic as p
import yaml

import parlance.lib.cli as click
import parlance.lib.json as json
from parlance.assessment import AssessmentEngine, PhaseTable, TurnResult
from parlance.core import di
from parlance.model import BaseModel, Phase, SessionID


class SimulatedTurn(BaseModel):
    """One step of a scripted session.

    `metadata` is merged before the turn is taken; `advance` forces the phase
    forward (to the next phase, or to the named one) instead of taking a turn.
    """

    transcript: str | None = None
    metadata: dict[str, t.Any] | None = None
    advance: Phase | bool = False


class SimulationScript(BaseModel):
    metadata: dict[str, t.Any] = p.Field(default_factory=dict)
    turns: list[SimulatedTurn | str] = p.Field(default_factory=list)
    finalize: bool = False

    def steps(self) -> t.Iterator[SimulatedTurn]:
        for turn in self.turns:
            yield SimulatedTurn(transcript=turn) if isinstance(turn, str) else turn


def load_script(path: pathlib.Path) -> SimulationScript:
    with path.open() as f:
        return SimulationScript.model_validate(yaml.safe_load(f) or {})


def echo_turn(result: TurnResult) -> None:
    said = result.turn.user_transcript or ""
    click.echo(click.style(f"[{result.turn.phase.value}:{result.turn.index}] ", fg="cyan"), nl=False)
    click.echo(f"> {said}")
    click.echo(click.style("    < ", fg="green"), nl=False)
    click.echo(result.prompt)
    if result.timed_out:
        click.echo(click.style("    (phase timed out)", fg="yellow"))
    if result.advanced:
        click.echo(click.style(f"    -> {result.phase.value}", fg="magenta"))


async def run_script(engine: AssessmentEngine, script: SimulationScript) -> dict[str, t.Any]:
    session = await engine.start()
    sid: SessionID = session.session_id
    if script.metadata:
        await engine.update_metadata(sid, script.metadata)

    for step in script.steps():
        if step.metadata:
            await engine.update_metadata(sid, step.metadata)
        if step.advance is not False:
            target = None if step.advance is True else step.advance
            phase = await engine.advance(sid, t.cast(Phase | None, target))
            click.echo(click.style(f"    => {phase.value}", fg="magenta"))
            continue
        echo_turn(await engine.submit_turn(sid, step.transcript))

    analytics = await engine.analytics(sid)
    report: dict[str, t.Any] = {
        "session_id": sid,
        "progress": await engine.progress(sid),
        "transcript": await engine.transcript(sid),
        "analytics": {
            **analytics,
            "phase_breakdown": {ph.value: b for ph, b in analytics["phase_breakdown"].items()},
        },
    }
    if script.finalize:
        report["score"] = await engine.finalize(sid)
    return report


@click.group("assessment")
def assessment(): ...


@assessment.command()
@di.inject
def phases(table: PhaseTable = di.Provide["assessment.phases"]):
    """Show the configured phase order and time budgets."""
    for phase, entry in table:
        nxt = entry.next.value if entry.next else "-"
        click.echo(f"{phase.position + 1:>2}  {phase.value:<14} {entry.duration / 1000:>6.1f}s  -> {nxt}")


@assessment.command()
@click.argument("script_path", type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path))
@click.option("--finalize/--no-finalize", default=None, help="score the session at the end of the script")
@di.inject
def simulate(
    script_path: pathlib.Path,
    finalize: bool | None,
    engine: AssessmentEngine = di.Provide["assessment.engine"],
):
    """Drive one session through the turns scripted in SCRIPT_PATH (YAML)."""
    script = load_script(script_path)
    if finalize is not None:
        script.finalize = finalize
    report = asyncio.run(run_script(engine, script))
    click.echo(json.dumps(report, indent=2))
