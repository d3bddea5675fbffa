"""
Test Suite for the Command-Line Interface
"""

import logging
from pathlib import Path

import pytest

import cli
from tabsim.config import ConfigLoader


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logging.getLogger("tabsim").handlers.clear()


def run_cli(*args):
    cli.CLI().run(list(args))


def test_generate_default(capsys):
    run_cli("generate", "--seed", "1")

    out = capsys.readouterr().out
    assert "Generated 6 rows x 2 columns" in out


def test_generate_from_preset(capsys):
    run_cli("generate", "--preset", "blocked_counts", "--head", "3")

    out = capsys.readouterr().out
    assert "Loaded preset: blocked_counts" in out
    assert "Generated 10 rows x 3 columns" in out


def test_generate_from_file(tmp_path: Path, capsys):
    path = tmp_path / "design.yaml"
    path.write_text(
        "dataset:\n"
        "  columns:\n"
        "    - name: g\n"
        "      labels: [a, b]\n"
        "      length_out: 5\n"
        "    - name: y\n"
        "      distribution: uniform\n"
        "      count: 5\n",
        encoding="utf-8",
    )

    run_cli("generate", str(path))

    assert "Generated 5 rows x 2 columns" in capsys.readouterr().out


def test_generate_missing_file_exits(tmp_path: Path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_cli("generate", str(tmp_path / "missing.yaml"))

    assert excinfo.value.code == 1
    assert "Error" in capsys.readouterr().out


def test_generate_length_mismatch_exits(tmp_path: Path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text(
        "dataset:\n"
        "  columns:\n"
        "    - name: g\n"
        "      labels: [a, b]\n"
        "      each: 3\n"
        "    - name: y\n"
        "      distribution: normal\n"
        "      count: 5\n",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit):
        run_cli("generate", str(path))

    assert "same length" in capsys.readouterr().out


def test_replicate_stack(capsys):
    run_cli("replicate", "--preset", "regression", "--trials", "3", "--mode", "stack", "--column", "x")

    out = capsys.readouterr().out
    assert "shape (3, 20)" in out
    assert "Replication complete: 3 trials" in out


def test_replicate_seed_reproduces_stack(capsys):
    args = ("replicate", "--preset", "regression", "--trials", "3", "--mode", "stack", "--seed", "7")

    run_cli(*args)
    first = capsys.readouterr().out
    run_cli(*args)
    second = capsys.readouterr().out

    assert first == second


def test_replicate_list(capsys):
    run_cli("replicate", "--trials", "4", "--mode", "list", "--seed", "2")

    out = capsys.readouterr().out
    assert "Per-trial datasets" in out
    assert "Replication complete: 4 trials" in out


def test_replicate_stack_of_labels_exits(capsys):
    with pytest.raises(SystemExit):
        run_cli("replicate", "--trials", "2", "--mode", "stack", "--column", "group")


def test_replicate_invalid_trials_exits(capsys):
    with pytest.raises(SystemExit):
        run_cli("replicate", "--trials", "0")

    assert "trials" in capsys.readouterr().out


def test_config_list(capsys):
    run_cli("config", "list")

    out = capsys.readouterr().out
    assert "two_groups" in out
    assert "regression" in out


def test_config_show(capsys):
    run_cli("config", "show", "two_groups")

    assert "response" in capsys.readouterr().out


def test_config_create(tmp_path: Path):
    output = tmp_path / "starter.yaml"

    run_cli("config", "create", str(output))

    assert output.exists()
    config = ConfigLoader().load_from_file(output)
    assert config.dataset.columns[0]["name"] == "group"
