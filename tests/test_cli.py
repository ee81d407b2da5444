import json

import pytest
from click.testing import CliRunner

from vaccine_efficacy.cli import run as run_module
from vaccine_efficacy.cli.main import cli
from vaccine_efficacy.trials import DEFAULT_TRIALS, dump_trials

FAST = ["--chains", "4", "--draws", "1000", "--tune", "0", "--seed", "2020"]


@pytest.fixture
def runner(monkeypatch, conjugate_sampler):
    monkeypatch.setattr(run_module, "make_sampler", lambda progressbar: conjugate_sampler)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    return CliRunner()


def test_run_prints_efficacy_and_comparison(runner, tmp_path):
    result = runner.invoke(cli, ["run", *FAST, "--output-dir", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "Moderna: median efficacy" in result.stdout
    assert "P(Pfizer efficacy > Moderna efficacy) = " in result.stdout
    assert (tmp_path / "efficacy_density.svg").exists()


def test_run_json_report(runner):
    result = runner.invoke(
        cli,
        ["run", *FAST, "--no-plots", "--json", "--point-estimate", "mean",
         "--interval", "0.8"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["point_estimate_method"] == "mean"
    assert payload["artifacts"] == []
    moderna = payload["vaccines"]["Moderna"]
    assert [i["prob"] for i in moderna["intervals"]] == [0.8]
    assert 0.9 <= moderna["median"] <= 1.0


def test_run_with_custom_trials_drops_default_comparison(runner):
    result = runner.invoke(
        cli, ["run", *FAST, "--no-plots", "--trial", "X:10000:4:10000:60"]
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("X: median efficacy")
    assert "P(" not in result.stdout


def test_run_with_explicit_comparison(runner):
    result = runner.invoke(
        cli,
        ["run", *FAST, "--no-plots",
         "--trial", "X:10000:4:10000:60", "--trial", "Y:10000:20:10000:60",
         "--compare", "X:Y"],
    )
    assert result.exit_code == 0, result.output
    assert "P(X efficacy > Y efficacy) = " in result.stdout


def test_run_rejects_malformed_trial(runner):
    result = runner.invoke(cli, ["run", "--trial", "X:10:11:10:1"])
    assert result.exit_code == 2
    assert "Invalid counts" in result.output


def test_run_reports_invalid_trial_file(runner, tmp_path):
    path = tmp_path / "trials.json"
    path.write_text(json.dumps({"X": {"vaccine": {"n": 5, "s": 6}, "placebo": {"n": 5, "s": 1}}}))
    result = runner.invoke(cli, ["run", *FAST, "--trials-file", str(path)])
    assert result.exit_code == 1
    assert "Invalid trial data for 'X'" in result.output


def test_trials_show():
    result = CliRunner().invoke(cli, ["trials", "show"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == dump_trials(DEFAULT_TRIALS)


def test_generate_trial_is_seeded_and_loadable(tmp_path):
    path = tmp_path / "synthetic.json"
    args = ["generate", "trial", "--name", "S", "--seed", "3", "-o", str(path)]
    assert CliRunner().invoke(cli, args).exit_code == 0
    first = path.read_text()
    assert CliRunner().invoke(cli, args).exit_code == 0
    assert path.read_text() == first

    result = CliRunner().invoke(cli, ["trials", "validate", str(path)])
    assert result.exit_code == 0
    assert list(json.loads(result.stdout)) == ["S"]
