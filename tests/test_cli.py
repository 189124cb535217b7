import json
import logging

import pytest

from impersonate import cli
from impersonate.models.errors import InsufficientStates
from impersonate.models.markov_chain import MarkovChainGenerator

WEECHAT_LOG = "10:00:00 alice hi there\n10:00:01 bob ignore me\n"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory and drop the handlers installed by the CLI."""
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger("impersonate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "chan.weechatlog"
    path.write_text(WEECHAT_LOG, encoding="utf-8")
    return str(path)


def test_generates_requested_strings(log_path, capsys):
    assert cli.main([log_path, "-a", "alice", "-l", "1", "-o", "3"]) == 0
    assert capsys.readouterr().out.splitlines() == ["hi there"] * 3


def test_output_size_zero(log_path, capsys):
    assert cli.main([log_path, "--author", "alice", "--learning-size", "1",
                     "--output-size", "0"]) == 0
    assert capsys.readouterr().out == "hi\n"


def test_skips_failed_generations(log_path, capsys):
    # bob never says anything, so nothing can be generated
    assert cli.main([log_path, "-a", "carol", "-o", "2"]) == 0

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.count("Skipping generation") == 2


def test_skips_only_failing_attempts(log_path, capsys, mocker):
    mocker.patch.object(MarkovChainGenerator, "generate",
                        side_effect=[InsufficientStates(0), "hello world"])

    assert cli.main([log_path, "-o", "2"]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_rejects_zero_learning_size(log_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([log_path, "-l", "0"])
    assert excinfo.value.code == 2


def test_rejects_negative_output_size(log_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([log_path, "-s", "-1"])
    assert excinfo.value.code == 2


def test_missing_log_file(tmp_path, capsys):
    assert cli.main([str(tmp_path / "missing.log")]) == 1
    assert "Cannot read log file" in capsys.readouterr().err


def test_irssi_format(tmp_path, capsys):
    path = tmp_path / "chan.log"
    path.write_text("10:00 <@alice> hello again\n10:01 < bob> nope\n")

    assert cli.main([str(path), "-f", "irssi", "-a", "alice", "-l", "1"]) == 0
    assert capsys.readouterr().out == "hello again\n"


def test_csv_format(tmp_path, capsys):
    path = tmp_path / "comments.csv"
    path.write_text("good morning\n")

    assert cli.main([str(path), "-f", "csv", "-l", "1"]) == 0
    assert capsys.readouterr().out == "good morning\n"


def test_config_file_supplies_defaults(log_path, tmp_path, capsys):
    config = tmp_path / "impersonate.yaml"
    config.write_text("author: alice\nlearning-size: 1\noutput-strings: 2\n")

    assert cli.main([log_path, "--config", str(config)]) == 0
    assert capsys.readouterr().out == "hi there\nhi there\n"

    # command-line arguments win over the configuration
    assert cli.main([log_path, "--config", str(config), "-o", "1", "-s", "0"]) == 0
    assert capsys.readouterr().out == "hi\n"


def test_config_lookup_by_environment(log_path, tmp_path, capsys):
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "impersonate_test.yaml").write_text(
        "author: alice\nlearning-size: 1\n")

    assert cli.main([log_path, "--env", "test"]) == 0
    assert capsys.readouterr().out == "hi there\n"


def test_missing_config_file(log_path, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([log_path, "--config", str(tmp_path / "missing.yaml")])
    assert excinfo.value.code == 2


def test_log_file_receives_records(log_path, tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    assert cli.main([log_path, "-a", "alice", "--log-file", str(log_file)]) == 0

    for handler in logging.getLogger("impersonate").handlers:
        handler.flush()
    content = log_file.read_text()
    assert "Training completed" in content
    assert "Generation finished" in content


@pytest.mark.parametrize("content", [
    "learning-size: two\n",
    "output-strings: -1\n",
    "output-size: [1, 2]\n",
    "weighted: 'false'\n",
    "log-level: loud\n",
])
def test_invalid_config_values_exit_with_usage_error(log_path, tmp_path, content):
    config = tmp_path / "bad.yaml"
    config.write_text(content)

    with pytest.raises(SystemExit) as excinfo:
        cli.main([log_path, "--config", str(config)])
    assert excinfo.value.code == 2


def test_command_line_disables_weighted_config(log_path, tmp_path, mocker):
    config = tmp_path / "impersonate.yaml"
    config.write_text("weighted: true\n")
    generate = mocker.patch.object(MarkovChainGenerator, "generate", return_value="hi")

    assert cli.main([log_path, "--config", str(config)]) == 0
    assert generate.call_args[0][0].weighted is True

    assert cli.main([log_path, "--config", str(config), "--no-weighted"]) == 0
    assert generate.call_args[0][0].weighted is False


def test_log_file_not_utf8(tmp_path, capsys):
    path = tmp_path / "latin1.weechatlog"
    path.write_bytes(b"10:00:00 alice caf\xe9 au lait\n")

    assert cli.main([str(path), "-a", "alice"]) == 1
    assert "Cannot read log file" in capsys.readouterr().err


def test_config_warnings_are_json(log_path, tmp_path, capsys):
    config = tmp_path / "impersonate.yaml"
    config.write_text("colour: red\n")

    assert cli.main([log_path, "--config", str(config)]) == 0
    messages = [json.loads(line)["message"]
                for line in capsys.readouterr().err.splitlines()]
    assert "Ignoring unknown configuration key: colour" in messages


def test_log_file_records_configuration(log_path, tmp_path):
    config = tmp_path / "impersonate.yaml"
    config.write_text("author: alice\n")
    log_file = tmp_path / "run.log"

    assert cli.main([log_path, "--config", str(config), "--log-file", str(log_file)]) == 0

    for handler in logging.getLogger("impersonate").handlers:
        handler.flush()
    records = [json.loads(line) for line in log_file.read_text().splitlines()]
    resolved = [r for r in records if r["message"] == "Configuration resolved"]
    assert resolved[0]["metrics"]["config_keys"] == ["author"]
