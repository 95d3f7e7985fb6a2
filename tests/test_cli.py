"""Command-line tests for the winrates CLI."""

import pytest
from helpers import make_log, make_team, write_corpus

from winrates import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # setup_logging() would point loguru at pytest's captured stderr
    monkeypatch.setattr(cli, "setup_logging", lambda: None)


@pytest.fixture
def corpus(tmp_path):
    return write_corpus(tmp_path / "gen8randombattle", {
        "2024-01-01": [make_log()] * 4,
        "2024-01-02": [make_log(p1elo=900)] * 2,
    })


def test_writes_both_outputs(corpus, tmp_path):
    csv_path = tmp_path / "out.csv"
    human_path = tmp_path / "out.txt"
    code = cli.main([
        "--minimum-elo", "1050", "-i", str(corpus),
        "-o", str(csv_path), "-H", str(human_path), "--workers", "2",
    ])
    assert code == 0
    lines = csv_path.read_text().split("\n")
    assert len(lines) == 12
    assert lines[0].startswith('"Rotom-Fan",4,4,100.0,')
    human = human_path.read_text()
    assert "Rotom-Fan" in human
    assert "100%" in human


def test_csv_only(corpus, tmp_path):
    csv_path = tmp_path / "out.csv"
    assert cli.main(["-i", str(corpus), "-o", str(csv_path)]) == 0
    # No rating filter by default: all six battles count
    assert csv_path.read_text().startswith('"Rotom-Fan",6,6,')


def test_exclusion(corpus, tmp_path):
    csv_path = tmp_path / "out.csv"
    cli.main(["-i", str(corpus), "-o", str(csv_path), "--exclude", "01-02"])
    assert csv_path.read_text().startswith('"Rotom-Fan",4,4,')


def test_requires_an_output(corpus, capsys):
    assert cli.main(["-i", str(corpus)]) == 2
    assert "at least one of --csv-output or --human-output" in capsys.readouterr().err


def test_requires_input(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-o", "out.csv"])
    assert exc.value.code == 2


def test_malformed_log_aborts_without_output(tmp_path):
    corpus = write_corpus(tmp_path / "fmt", {
        "day": [make_log(), make_log(p2team={"species": "Entei"})],
    })
    csv_path = tmp_path / "out.csv"
    assert cli.main(["-i", str(corpus), "-o", str(csv_path)]) == 1
    assert not csv_path.exists()


def test_skip_malformed(tmp_path):
    corpus = write_corpus(tmp_path / "fmt", {
        "day": [make_log(), make_log(p2team=[["Entei"]]), make_log(p1team=make_team(["Entei"]))],
    })
    csv_path = tmp_path / "out.csv"
    assert cli.main(["-i", str(corpus), "-o", str(csv_path), "--skip-malformed"]) == 0
    rows = {line.split(",")[0]: line.split(",")[1:3] for line in csv_path.read_text().split("\n")}
    assert rows['"Entei"'] == ["3", "1"]


def test_missing_input_directory(tmp_path):
    csv_path = tmp_path / "out.csv"
    assert cli.main(["-i", str(tmp_path / "missing"), "-o", str(csv_path)]) == 1
    assert not csv_path.exists()


@pytest.mark.parametrize("workers", ["0", "-3", "many"])
def test_rejects_bad_worker_count(corpus, tmp_path, capsys, workers):
    csv_path = tmp_path / "out.csv"
    with pytest.raises(SystemExit) as exc:
        cli.main(["-i", str(corpus), "-o", str(csv_path), "--workers", workers])
    assert exc.value.code == 2
    assert "--workers" in capsys.readouterr().err
    assert not csv_path.exists()


def test_failed_second_write_leaves_no_output(corpus, tmp_path):
    csv_path = tmp_path / "out.csv"
    human_path = tmp_path / "missing-dir" / "out.txt"
    code = cli.main(["-i", str(corpus), "-o", str(csv_path), "-H", str(human_path)])
    assert code == 1
    assert not csv_path.exists()
    assert not human_path.exists()


def test_write_outputs_removes_earlier_files(tmp_path):
    first = tmp_path / "a.csv"
    with pytest.raises(OSError):
        cli.write_outputs([(first, "x"), (tmp_path / "nope" / "b.txt", "y")])
    assert not first.exists()


def test_root_script_delegates_to_cli():
    import main

    assert main.run is cli.run
