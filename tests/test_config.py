"""Tests for settings loading and container boot."""

from __future__ import annotations

import logging
import typing as t
from pathlib import Path

import pydantic as p
import pytest
from pydantic_settings import SettingsError

from parlance.assessment import AssessmentEngine, map_to_cefr, PhaseTable, Scorer, SignalAggregator
from parlance.core import Secrets, Settings
from parlance.core.config import AssessmentSettings
from parlance.core.container import ParlanceContainer
from parlance.core.logging import TRACE
from parlance.llm import SilentSpeechService
from parlance.model import CEFRLevel, DeploymentEnvironment, Phase
from parlance.storage.session import InMemorySessionStore


def load(root: Path, env: DeploymentEnvironment = DeploymentEnvironment.Test, *override: str) -> Settings:
    return Settings(env=env, root=p.FileUrl(f"file://{root}/config"), override=override)


class TestSettings(object):
    """Settings cascade from config/ through config/env.d/<env>/ to -o overrides."""

    def test_local_defaults(self, root: Path) -> None:
        settings = load(root, DeploymentEnvironment.Local)

        assert settings.vendor.speech.backend == "openai"
        assert settings.storage.backend == "memory"
        assert settings.assessment.phases[Phase.Task] == 90_000
        assert settings.assessment.cefr_thresholds[CEFRLevel.B2] == 16
        assert settings.template.llm_path == "parlance/templates/llm"

    def test_environment_file_replaces_base_file(self, root: Path) -> None:
        settings = load(root, DeploymentEnvironment.Test)

        assert settings.vendor.speech.backend == "silent"
        assert settings.logging.root.level == "WARNING"
        # no env.d/test/assessment.yaml, so the base file applies
        assert settings.assessment.phases[Phase.Wrap] == 15_000

    def test_development_uses_redis(self, root: Path) -> None:
        settings = load(root, DeploymentEnvironment.Development)

        assert settings.storage.backend == "redis"
        assert settings.storage.redis is not None
        assert settings.storage.redis.database == 1

    def test_overrides(self, root: Path) -> None:
        settings = load(
            root,
            DeploymentEnvironment.Test,
            "assessment.phases.wrap=5000",
            "vendor.speech.speed=1.5",
        )

        assert settings.assessment.phases[Phase.Wrap] == 5000
        assert settings.assessment.phases[Phase.Task] == 90_000
        assert settings.vendor.speech.speed == 1.5
        assert settings.vendor.speech.backend == "silent"

    def test_malformed_override(self, root: Path) -> None:
        with pytest.raises((SettingsError, ValueError)):
            load(root, DeploymentEnvironment.Test, "assessment.phases.wrap")


class TestAssessmentSettings(object):
    def test_defaults(self) -> None:
        settings = AssessmentSettings()
        assert sum(settings.phases.values()) == 360_000
        assert settings.session.idle_timeout_ms == 300_000

    def test_every_phase_needs_a_duration(self) -> None:
        phases = {ph: 1000 for ph in Phase if ph is not Phase.Listening}
        with pytest.raises(p.ValidationError, match="listening"):
            AssessmentSettings(phases=phases)

    def test_negative_duration(self) -> None:
        phases: dict[Phase, int] = {ph: 1000 for ph in Phase}
        phases[Phase.Task] = -1
        with pytest.raises(p.ValidationError):
            AssessmentSettings(phases=phases)

    def test_thresholds_must_increase(self) -> None:
        thresholds = {CEFRLevel.A2: 6, CEFRLevel.B1: 5, CEFRLevel.B2: 16, CEFRLevel.C1: 21, CEFRLevel.C2: 26}
        with pytest.raises(p.ValidationError, match="increase"):
            AssessmentSettings(cefr_thresholds=thresholds)

    def test_component_defaults_follow_settings(self) -> None:
        settings = AssessmentSettings()
        signals = SignalAggregator()

        assert signals.filler_words == settings.signals.filler_words
        assert signals.placeholder_silence_ratio == settings.signals.silence_ratio
        assert Scorer(signals, None).cefr_thresholds == settings.cefr_thresholds
        assert map_to_cefr(15) is CEFRLevel.B1


class TestSecrets(object):
    def test_missing_file_yields_no_secrets(self, tmp_path: Path) -> None:
        secrets = Secrets(env=DeploymentEnvironment.Test, root=p.FileUrl(f"file://{tmp_path}"))
        assert secrets.llm.openai is None
        assert secrets.redis.password is None

    def test_most_specific_file_wins(self, tmp_path: Path) -> None:
        (tmp_path / "secrets.yaml").write_text("llm:\n  openai:\n    secret_key: base-key\n")
        env_dir = tmp_path / "env.d" / "test"
        env_dir.mkdir(parents=True)
        (env_dir / "secrets.yaml").write_text("llm:\n  openai:\n    secret_key: test-key\n")

        secrets = Secrets(env=DeploymentEnvironment.Test, root=p.FileUrl(f"file://{tmp_path}"))

        assert secrets.llm.openai is not None
        assert secrets.llm.openai.secret_key.get_secret_value() == "test-key"


class TestContainer(object):
    """The booted container assembles a working engine from configuration alone."""

    def test_boot_config(self, container: ParlanceContainer) -> None:
        bc = ParlanceContainer.boot_config(container)
        assert bc.env is DeploymentEnvironment.Test
        assert bc.debug is False

    def test_boot_config_before_boot(self) -> None:
        with pytest.raises(RuntimeError):
            ParlanceContainer.boot_config(ParlanceContainer())

    def test_collaborators_without_secrets(self, container: ParlanceContainer) -> None:
        assert isinstance(container.llm.speech(), SilentSpeechService)
        assert container.llm.transcription() is None
        assert container.llm.scoring() is None
        assert isinstance(container.storage.session(), InMemorySessionStore)

    def test_phase_table(self, container: ParlanceContainer) -> None:
        table = container.assessment.phases()
        assert isinstance(table, PhaseTable)
        assert [ph for ph, _ in table][0] is Phase.Init
        assert table.duration(Phase.Listening) == 60_000

    def test_engine_is_shared(self, container: ParlanceContainer) -> None:
        engine = container.assessment.engine()
        assert isinstance(engine, AssessmentEngine)
        assert container.assessment.engine() is engine
        assert engine.store is container.storage.session()

    @pytest.mark.anyio
    async def test_engine_runs_text_only(self, container: ParlanceContainer) -> None:
        engine: AssessmentEngine = container.assessment.engine()

        session = await engine.start()
        result = await engine.submit_turn(session.session_id, "hello, my name is Ana")

        assert result.turn.user_transcript == "hello, my name is Ana"
        assert result.audio == b""
        status = await engine.status(session.session_id)
        assert status["turn_index"] == 1

    def test_sweeper_interval(self, container: ParlanceContainer) -> None:
        sweeper = container.assessment.sweeper()
        assert sweeper.interval == 60.0
        assert sweeper.running is False


def test_settings_dump_round_trips(root: Path) -> None:
    settings = load(root)
    data: dict[str, t.Any] = settings.model_dump(mode="json", exclude={"root", "env", "override"})
    assert data["assessment"]["phases"]["interview_q1"] == 60_000
    assert data["logging"]["formatters"]["plain"]["()"] == "parlance.lib.logging.ExtraFormatter"


def test_logging_provider(container: ParlanceContainer) -> None:
    provider = container.logging()

    assert provider.get_logger().name == __name__
    assert provider.get_logger(name="parlance.storage").name == "parlance.storage"
    assert logging.getLevelName(TRACE) == "TRACE"
