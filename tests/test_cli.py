import pytest

from beast.deploy import cli, pipeline
from beast.deploy.errors import ExternalToolError

ARGS = ["--k8s-service-name=api", "--namespace=staging", "--module-name=/"]


@pytest.fixture
def ci_env(monkeypatch, tmp_path):
    monkeypatch.setenv("BUILD_NUMBER", "42")
    monkeypatch.setenv("BEAST_AWS_ACCOUNT_ID", "111122223333")
    monkeypatch.setenv("WORKSPACE", str(tmp_path))


def test_invalid_option(capsys):
    assert cli.main(["--k8s-service-name=api", "--bogus=1"]) == 1
    assert "Invalid option: --bogus=1" in capsys.readouterr().err


def test_missing_option(capsys):
    assert cli.main(["--k8s-service-name=api"]) == 1
    assert "Three fields are required" in capsys.readouterr().err


def test_missing_build_number(monkeypatch, capsys):
    monkeypatch.delenv("BUILD_NUMBER", raising=False)
    monkeypatch.setenv("BEAST_AWS_ACCOUNT_ID", "111122223333")
    assert cli.main(ARGS) == 1
    assert "BUILD_NUMBER" in capsys.readouterr().err


def test_success(ci_env, monkeypatch):
    calls = []
    monkeypatch.setattr(pipeline, "run", lambda invocation, settings: calls.append(invocation))
    assert cli.main(ARGS) == 0
    assert calls[0].service_name == "api"


def test_stage_and_tool_exit_code_are_reported(ci_env, monkeypatch, capsys):
    def fail(invocation, settings):
        error = ExternalToolError("Step 'Pushing' failed with exit code 5", 5)
        error.stage = "publish-image"
        raise error

    monkeypatch.setattr(pipeline, "run", fail)
    assert cli.main(ARGS) == 5
    err = capsys.readouterr().err
    assert "[publish-image]" in err
    assert "exit code 5" in err


def test_language_detection_failure(ci_env, capsys):
    assert cli.main(ARGS) == 1
    assert "[detect-language] failed to determine code language" in capsys.readouterr().err


def test_undecodable_server_config_exits_cleanly(ci_env, tmp_path, capsys):
    (tmp_path / "requirements.txt").write_text("")
    (tmp_path / "server-config.yml").write_bytes(b"\xff\xfeserver:\n")
    assert cli.main(ARGS) == 1
    assert "[resolve-fields] server config is not valid UTF-8" in capsys.readouterr().err
