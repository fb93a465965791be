from pathlib import Path

import pytest

from infimum.config import (LimitsConfig, SystemConfig, VerifierConfig,
                            load_config, save_config)
from infimum.engine import PollEngine
from infimum.poll import ManualClock
from infimum.zk import PoseidonHasher, SnarkjsVerifier


def test_defaults():
    config = SystemConfig()
    assert config.limits.max_coordinator_polls == 16
    assert config.hash_config.constants_file is None
    assert config.verifier_config.snarkjs_path == "snarkjs"


def test_limits_must_be_positive():
    with pytest.raises(ValueError):
        LimitsConfig(max_vote_options=0)


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "absent.yaml") == SystemConfig()


def test_save_then_load(tmp_path):
    path = tmp_path / "config.yaml"
    original = SystemConfig(
        limits=LimitsConfig(max_coordinator_polls=3, max_vote_options=8),
        verifier_config=VerifierConfig(snarkjs_path="/opt/snarkjs", timeout_seconds=5),
        log_level="DEBUG"
    )
    save_config(original, path)
    assert load_config(path) == original


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("limits:\n  max_vote_options: 12\nlog_level: WARNING\n")
    config = load_config(path)
    assert config.limits.max_vote_options == 12
    assert config.limits.max_registration_depth == 31
    assert config.log_level == "WARNING"


def test_unreadable_file_falls_back(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("limits: [unclosed\n")
    assert load_config(path) == SystemConfig()


def test_engine_from_config(tmp_path):
    config = SystemConfig(log_dir=tmp_path / "logs", enable_performance_monitoring=False)
    engine = PollEngine.from_config(config, ManualClock(1))
    assert isinstance(engine.hasher, PoseidonHasher)
    assert isinstance(engine.verifier, SnarkjsVerifier)
    assert engine.monitor is None
    assert engine.limits == config.limits


def test_shipped_config_loads():
    shipped = Path(__file__).resolve().parent.parent / "config.yaml"
    assert load_config(shipped).limits == LimitsConfig()
