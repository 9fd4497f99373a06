import io
import os
import json

import pytest
from rich.console import Console

import goodcheck
from config.constants import EXIT_CODES
from src.models.exceptions import NetworkException


def _cli(answers=()):
    answers = list(answers)
    return goodcheck.GoodCheckCLI(input_fn=lambda prompt: answers.pop(0), console=Console(file=io.StringIO()))


@pytest.fixture
def strategy_file(tmp_path):
    f = tmp_path / "strategies.txt"
    f.write_text("--split 1\n--disorder 2\n", encoding="utf-8")
    return f


@pytest.fixture
def checklist_file(tmp_path):
    f = tmp_path / "checklist.txt"
    f.write_text("rutracker.org\nhttps://youtube.com\n", encoding="utf-8")
    return f


def test_build_test_urls_order(monkeypatch, checklist_file):
    monkeypatch.setattr(goodcheck, "fetch_cluster_codename", lambda urls: "uzpk")
    cli = _cli()
    args = cli.parse_arguments(["--tls12", "--checklist", str(checklist_file)])
    config = cli._create_run_config(args, {})
    assert cli.build_test_urls(config, args.checklist_file) == [
        "https://tls-v1-2.badssl.com:1012",
        "https://rr1---sn-0123.googlevideo.com",
        "https://rutracker.org",
        "https://youtube.com",
    ]


def test_codename_failure_omits_gcs(monkeypatch, checklist_file):
    def boom(urls):
        raise NetworkException("no codename")

    monkeypatch.setattr(goodcheck, "fetch_cluster_codename", boom)
    cli = _cli()
    args = cli.parse_arguments(["--checklist", str(checklist_file)])
    urls = cli.build_test_urls(cli._create_run_config(args, {}), args.checklist_file)
    assert urls == ["https://rutracker.org", "https://youtube.com"]


def test_tls12_skipped_by_default():
    cli = _cli()
    config = cli._create_run_config(cli.parse_arguments(["--skip-gcs"]), {})
    assert config.skip_auto_tls12_breakage_test
    assert cli.build_test_urls(config) == []


def test_exe_override_and_profile(tmp_path):
    cli = _cli()
    args = cli.parse_arguments(["--exe", "cia=/opt/byedpi/ciadpi", "--passes", "0"])
    config = cli._create_run_config(args, {"executables": {"zapret": "/opt/winws"}, "logs_folder": "L"})
    assert config.executables["cia"] == "/opt/byedpi/ciadpi"
    assert config.executables["zapret"] == "/opt/winws"
    assert config.logs_folder == "L"
    assert config.passes == 1


def test_unknown_provider_run_completes(tmp_path, capsys, strategy_file, checklist_file):
    best = tmp_path / "best.txt"
    cli = _cli()
    args = cli.parse_arguments([
        "--provider", "xyz",
        "--strategy", str(strategy_file),
        "--checklist", str(checklist_file),
        "--skip-gcs",
        "--no-log-file",
        "--save-best", str(best),
    ])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]

    out = capsys.readouterr().out
    assert "Strategy: --split 1 -> 0/2 successful requests" in out
    assert "Strategy: --disorder 2 -> 0/2 successful requests" in out
    assert best.read_text(encoding="utf-8") == "--split 1\n--disorder 2\n"


def test_json_report(tmp_path, capsys, strategy_file, checklist_file):
    cli = _cli()
    args = cli.parse_arguments([
        "--provider", "xyz", "--strategy", str(strategy_file), "--checklist", str(checklist_file),
        "--skip-gcs", "--no-log-file", "--json",
    ])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]
    data = json.loads(capsys.readouterr().out)
    assert data["total_urls"] == 2
    assert [r["strategy"] for r in data["results"]] == ["--split 1", "--disorder 2"]
    assert data["best_score"] == 0


def test_unwritable_best_file_does_not_fail_run(tmp_path, capsys, strategy_file, checklist_file):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    cli = _cli()
    args = cli.parse_arguments([
        "--provider", "xyz", "--strategy", str(strategy_file), "--checklist", str(checklist_file),
        "--skip-gcs", "--no-log-file", "--save-best", str(blocker / "best.txt"),
    ])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]
    assert "Strategy: --split 1 -> 0/2" in capsys.readouterr().out


def test_missing_strategy_file(tmp_path, checklist_file):
    cli = _cli()
    args = cli.parse_arguments([
        "--provider", "cia", "--strategy", str(tmp_path / "missing.txt"),
        "--checklist", str(checklist_file), "--skip-gcs", "--no-log-file",
    ])
    assert cli.run(args) == EXIT_CODES["INPUT_ERROR"]


def test_no_urls_exits(strategy_file):
    cli = _cli()
    args = cli.parse_arguments(["--provider", "cia", "--strategy", str(strategy_file), "--skip-gcs", "--no-log-file"])
    assert cli.run(args) == EXIT_CODES["INPUT_ERROR"]


def test_interactive_cancel(strategy_file):
    cli = _cli(answers=["0"])
    args = cli.parse_arguments(["--strategy", str(strategy_file), "--skip-gcs", "--no-log-file"])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]
    assert cli.evaluator is None


def test_interactive_provider_choice(tmp_path):
    exe = tmp_path / "ciadpi.exe"
    exe.write_bytes(b"")
    cli = _cli(answers=["1"])
    args = cli.parse_arguments(["--exe", f"cia={exe}", "--exe", f"gdpi={tmp_path / 'none.exe'}", "--exe", f"zapret={tmp_path / 'none2.exe'}"])
    config = cli._create_run_config(args, {})
    assert cli.choose_provider(config) == "cia"


def test_strategy_file_prompt(tmp_path):
    cli = _cli(answers=["gdpi.txt"])
    config = cli._create_run_config(cli.parse_arguments([]), {"strategies_folder": str(tmp_path)})
    assert cli.ask_strategy_file(config) == str(tmp_path / "gdpi.txt")


def test_bad_exe_override_is_config_error():
    cli = _cli()
    args = cli.parse_arguments(["--exe", "no-equals-sign", "--no-log-file"])
    assert cli.run(args) == EXIT_CODES["CONFIG_ERROR"]


def test_log_file_written(tmp_path, strategy_file, checklist_file):
    profile = tmp_path / "profile.json"
    profile.write_text(json.dumps({"logs_folder": str(tmp_path / "Logs")}), encoding="utf-8")
    cli = _cli()
    args = cli.parse_arguments([
        "--provider", "xyz", "--strategy", str(strategy_file), "--checklist", str(checklist_file),
        "--skip-gcs", "--profile", str(profile),
    ])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]
    logs = list((tmp_path / "Logs").glob("availability_check_*.txt"))
    assert len(logs) == 1
    assert "Unknown provider: xyz" in logs[0].read_text(encoding="utf-8")


def _closed_stdin(prompt):
    raise EOFError


def test_closed_stdin_cancels_provider_choice(strategy_file):
    cli = goodcheck.GoodCheckCLI(input_fn=_closed_stdin, console=Console(file=io.StringIO()))
    args = cli.parse_arguments(["--strategy", str(strategy_file), "--skip-gcs", "--no-log-file"])
    assert cli.run(args) == EXIT_CODES["SUCCESS"]
    assert cli.evaluator is None


def test_closed_stdin_strategy_prompt_is_input_error(tmp_path, checklist_file):
    cli = goodcheck.GoodCheckCLI(input_fn=_closed_stdin, console=Console(file=io.StringIO()))
    args = cli.parse_arguments([
        "--provider", "cia", "--checklist", str(checklist_file), "--skip-gcs", "--no-log-file",
    ])
    config = cli._create_run_config(args, {"strategies_folder": str(tmp_path / "Strategies")})
    assert cli.ask_strategy_file(config) == os.path.join(str(tmp_path / "Strategies"), "")
    assert cli.run(args) == EXIT_CODES["INPUT_ERROR"]
