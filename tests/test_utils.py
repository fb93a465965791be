import json
import logging

import pytest

from infimum.poll import PollState
from infimum.utils import PerformanceMonitor, save_results, setup_logging


def test_monitor_records_failures():
    monitor = PerformanceMonitor()
    with monitor.start_operation("merge_poll_state"):
        pass
    with pytest.raises(RuntimeError):
        with monitor.start_operation("merge_poll_state"):
            raise RuntimeError("boom")

    summary = monitor.get_summary()
    assert summary['total_operations'] == 2
    assert summary['operations']['merge_poll_state']['failures'] == 1
    assert monitor.metrics[1].additional_data == {'error': 'RuntimeError'}


def test_empty_summary():
    assert PerformanceMonitor().get_summary()['total_operations'] == 0


def test_save_results_serializes_engine_values(tmp_path):
    target = tmp_path / "out" / "poll.json"
    save_results({'root': b"\x01\x02", 'state': PollState.TALLIED, 'tally': (1, 2)}, target)

    data = json.loads(target.read_text())['data']
    assert data == {'root': '0102', 'state': 'tallied', 'tally': [1, 2]}


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "engine.log"
    setup_logging("DEBUG", log_file)
    logging.getLogger("infimum.test").info("hello")
    for handler in logging.getLogger().handlers[:]:
        handler.flush()
        logging.getLogger().removeHandler(handler)
        handler.close()
    assert "hello" in log_file.read_text()
