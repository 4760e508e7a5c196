import pickle
import textwrap

import pytest
from click.testing import CliRunner

from app_harness.cli import cli

APP_SOURCE = textwrap.dedent("""
    def analyse(data=None, factor=1, **settings):
        return [value * factor for value in data]

    def nothing(**settings):
        return None

    def broken(**settings):
        raise RuntimeError("app failed")

    not_callable = 42
""")


@pytest.fixture
def app_file(tmp_path):
    path = tmp_path / "app.py"
    path.write_text(APP_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def settings_file(tmp_path):
    source = tmp_path / "input.pickle"
    source.write_bytes(pickle.dumps([1, 2, 3]))
    path = tmp_path / "local.toml"
    path.write_text(
        "[runtime]\n"
        f'source_file = "{source}"\n'
        f'output_file = "{tmp_path / "output.pickle"}"\n'
        f'error_file = "{tmp_path / "error.log"}"\n'
        "configuration = '{\"factor\": 10, \"token\": \"s3cr3t\"}'\n"
        'mask_setting_ids = "token"\n'
        'log_level = "INFO"\n',
        encoding="utf-8",
    )
    return path


def test_run_writes_the_output(app_file, settings_file, tmp_path):
    result = CliRunner().invoke(cli, ["run", f"{app_file}:analyse", "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    assert pickle.loads((tmp_path / "output.pickle").read_bytes()) == [10, 20, 30]


def test_run_with_none_result(app_file, settings_file, tmp_path):
    result = CliRunner().invoke(cli, ["run", f"{app_file}:nothing", "--settings", str(settings_file),
                                      "--source-file", ""])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "output.pickle").stat().st_size == 0


def test_batch_failure_exits_with_the_error(app_file, settings_file, tmp_path):
    result = CliRunner().invoke(cli, ["run", f"{app_file}:broken", "--settings", str(settings_file),
                                      "--source-file", ""])

    assert result.exit_code != 0
    assert isinstance(result.exception, RuntimeError)
    assert "app failed" in (tmp_path / "error.log").read_text(encoding="utf-8")


def test_session_mode_stops_with_code_10_on_null_input(app_file, settings_file, tmp_path):
    empty = tmp_path / "empty.pickle"
    empty.touch()

    result = CliRunner().invoke(cli, [
        "run", f"{app_file}:analyse", "--settings", str(settings_file),
        "--mode", "session", "--source-file", str(empty),
    ])

    assert result.exit_code == 10
    assert "Stopping session with code 10" in result.output


def test_clear_output_removes_stale_output(app_file, tmp_path):
    output = tmp_path / "output.pickle"
    output.write_bytes(b"stale")
    artifacts = tmp_path / "artifacts"

    result = CliRunner().invoke(cli, ["run", f"{app_file}:broken", "--clear-output",
                                      "--output-file", str(output)],
                                env={"APP_ARTIFACTS_DIR": str(artifacts)})

    assert isinstance(result.exception, RuntimeError)
    assert not output.exists()
    assert (artifacts / ".keep").exists()


@pytest.mark.parametrize("target", ["no-colon", "missing_module_xyz:run", "{app}:not_callable", "{app}:absent"])
def test_bad_target_is_a_usage_error(app_file, target):
    result = CliRunner().invoke(cli, ["run", target.format(app=app_file)])

    assert result.exit_code == 2
    assert "TARGET" in result.output


def test_missing_settings_file_is_a_usage_error(app_file, tmp_path):
    result = CliRunner().invoke(cli, ["run", f"{app_file}:nothing", "--settings", str(tmp_path / "nope.toml")])

    assert result.exit_code == 2
    assert "Settings file not found" in result.output


def test_show_config_masks_secrets(settings_file):
    result = CliRunner().invoke(cli, ["show-config", "--settings", str(settings_file)])

    assert result.exit_code == 0, result.output
    assert "***masked***" in result.output
    assert "s3cr3t" not in result.output
    assert '"factor": 10' in result.output
