from unittest.mock import MagicMock

import pytest

from impersonate.utils.system_monitoring import ResourceMonitor


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing"""
    return MagicMock()


def test_get_resource_usage(mock_logger):
    usage = ResourceMonitor(mock_logger).get_resource_usage()

    assert usage["memory"]["current_mb"] > 0
    assert "process_percent" in usage["cpu"]
    assert usage["process_id"] > 0


def test_log_progress_includes_operation(mock_logger):
    monitor = ResourceMonitor(mock_logger)
    monitor.start("training")
    monitor.log_progress("Training finished", extra_metrics={"states": 4})

    message = mock_logger.info.call_args[0][0]
    metrics = mock_logger.info.call_args[1]["extra"]["metrics"]
    assert message == "Training finished"
    assert metrics["states"] == 4
    assert metrics["operation"] == "training"
    assert "system_resources" in metrics
    assert metrics["elapsed_time"] >= 0


def test_stop_resets_operation(mock_logger):
    monitor = ResourceMonitor(mock_logger)
    monitor.start("training")

    assert monitor.stop() >= 0
    assert monitor.current_operation is None
    assert monitor.stop() is None


def test_uses_psutil(mock_logger, mocker):
    process = MagicMock()
    process.memory_info.return_value.rss = 2 * 1024 * 1024
    process.cpu_percent.return_value = 12.5
    mocker.patch("psutil.Process", return_value=process)

    usage = ResourceMonitor(mock_logger).get_resource_usage()
    assert usage["memory"]["current_mb"] == 2
    assert usage["cpu"]["process_percent"] == 12.5
