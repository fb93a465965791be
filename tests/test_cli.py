import json
import logging
import sys

import pytest

import main
from infimum.accumulator import Accumulator
from infimum.config import load_config
from infimum.poll import PublicKey, registration_leaf
from infimum.zk import to_field_bytes


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield tmp_path
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
        handler.close()


def run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["main.py", *args])
    main.main()


def test_root_command(monkeypatch, capsys, hasher):
    run(monkeypatch, "root", "--depth", "2", "5", "0x07")
    out = json.loads(capsys.readouterr().out)
    expected = Accumulator.compute_root([to_field_bytes(5), to_field_bytes(7)], 2, hasher)
    assert out["root"] == "0x" + expected.hex()
    assert out["leaf_count"] == 2


def test_leaf_command(monkeypatch, capsys, hasher):
    run(monkeypatch, "leaf", "--x", "3", "--y", "4", "--block", "102")
    expected = registration_leaf(hasher, PublicKey(to_field_bytes(3), to_field_bytes(4)), 102)
    assert capsys.readouterr().out.strip() == "0x" + expected.hex()


def test_root_command_rejects_overflow(monkeypatch):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, "root", "--depth", "1", "1", "2", "3")
    assert exc.value.code == 1


def test_config_command(monkeypatch, workdir):
    with pytest.raises(SystemExit) as exc:
        run(monkeypatch, "config", "--output", "generated.yaml")
    assert exc.value.code == 0
    assert load_config(workdir / "generated.yaml").limits.max_vote_options == 256
