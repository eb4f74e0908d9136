import pytest
from click.testing import CliRunner

from dash_deploy.cli import main

from conftest import make_build


SUBCOMMANDS = ["setup", "install", "test", "build", "deploy", "manual", "full", "verify"]


def _invoke(project, *args: str, input: str | None = None):  # noqa: ANN001, ANN202, A002
    return CliRunner().invoke(main, ["-C", str(project), *args], input=input)


def _archives(directory) -> list:  # noqa: ANN001
    return [p.name for p in directory.iterdir() if p.name.endswith(".tar.gz")]


def test_no_args_prints_usage(project) -> None:  # noqa: ANN001
    result = _invoke(project)

    assert result.exit_code == 0
    assert "Usage" in result.output
    assert "manual" in result.output


def test_help_command_prints_usage(fake_runner, project) -> None:  # noqa: ANN001
    result = _invoke(project, "help")

    assert result.exit_code == 0
    assert "Usage" in result.output
    # help 는 사전 요구사항 점검도 하지 않는다.
    assert fake_runner.calls == []


def test_unknown_command_prints_usage_and_exits_1(fake_runner, project) -> None:  # noqa: ANN001
    result = _invoke(project, "launch")

    assert result.exit_code == 1
    assert "launch" in result.output
    assert "Usage" in result.output
    assert fake_runner.calls == []


@pytest.mark.parametrize("command", SUBCOMMANDS)
def test_old_runtime_blocks_every_command_before_side_effects(fake_runner, project, command: str) -> None:  # noqa: ANN001
    fake_runner.respond("node", "--version", stdout="v16.20.2\n")
    make_build(project / "web-dashboard")

    result = _invoke(project, command, input="2\n")

    assert result.exit_code == 1
    assert fake_runner.commands == [["node", "--version"]]
    assert not (project / "web-dashboard" / ".env.local").exists()
    assert _archives(project) == []


@pytest.mark.parametrize("command", SUBCOMMANDS)
def test_missing_node_blocks_every_command(fake_runner, project, command: str) -> None:  # noqa: ANN001
    fake_runner.missing.add("node")

    result = _invoke(project, command)

    assert result.exit_code == 1
    assert fake_runner.calls == []


def test_setup_twice_keeps_files(fake_runner, project) -> None:  # noqa: ANN001, ARG001
    assert _invoke(project, "setup").exit_code == 0
    dashboard = project / "web-dashboard"
    first = (dashboard / ".env.local").read_text(encoding="utf-8"), (dashboard / ".env.production").read_text(encoding="utf-8")

    result = _invoke(project, "setup")

    assert result.exit_code == 0
    second = (dashboard / ".env.local").read_text(encoding="utf-8"), (dashboard / ".env.production").read_text(encoding="utf-8")
    assert first == second


def test_install_without_dashboard_exits_1_without_npm(fake_runner, project) -> None:  # noqa: ANN001
    (project / "web-dashboard").rmdir()

    result = _invoke(project, "install")

    assert result.exit_code == 1
    assert fake_runner.commands == [["node", "--version"]]


def test_test_command_always_succeeds(fake_runner, project) -> None:  # noqa: ANN001
    fake_runner.respond("npm", "run", "test", returncode=1)

    result = _invoke(project, "test")

    assert result.exit_code == 0
    assert "[WARNING]" in result.output


def test_build_succeeds_despite_advisory_failures(fake_runner, project) -> None:  # noqa: ANN001
    fake_runner.respond("npm", "run", "lint", returncode=1)
    fake_runner.respond("npm", "run", "type-check", returncode=1)

    result = _invoke(project, "build")

    assert result.exit_code == 0


def test_build_failure_exits_1(fake_runner, project) -> None:  # noqa: ANN001
    fake_runner.respond("npm", "run", "build", returncode=1)

    result = _invoke(project, "build")

    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_manual_without_build_exits_1(fake_runner, project) -> None:  # noqa: ANN001, ARG001
    result = _invoke(project, "manual")

    assert result.exit_code == 1
    assert _archives(project) == []


def test_manual_after_build_creates_one_archive(builds_on_npm_build, project) -> None:  # noqa: ANN001, ARG001
    assert _invoke(project, "build").exit_code == 0

    result = _invoke(project, "manual")

    assert result.exit_code == 0
    archives = _archives(project)
    assert len(archives) == 1
    assert archives[0].startswith("pranayama-dashboard-")


def test_deploy_login_declined_exits_1(fake_runner, project) -> None:  # noqa: ANN001
    make_build(project / "web-dashboard")
    fake_runner.respond("netlify", "status", returncode=1)

    result = _invoke(project, "deploy", input="n\n")

    assert result.exit_code == 1
    assert not fake_runner.ran("netlify", "deploy")


def test_deploy_login_accepted(fake_runner, project) -> None:  # noqa: ANN001
    make_build(project / "web-dashboard")
    fake_runner.respond("netlify", "status", returncode=1)

    result = _invoke(project, "deploy", input="y\n")

    assert result.exit_code == 0, result.output
    assert fake_runner.ran("netlify", "login")
    assert fake_runner.ran("netlify", "deploy", "--prod", "--dir=build")


def test_full_manual_choice(builds_on_npm_build, project) -> None:  # noqa: ANN001
    builds_on_npm_build.respond("npm", "run", "test", returncode=1)
    builds_on_npm_build.respond("npm", "run", "lint", returncode=1)

    result = _invoke(project, "full", input="2\n")

    assert result.exit_code == 0, result.output
    assert len(_archives(project)) == 1


def test_full_invalid_choice_exits_1_after_build(builds_on_npm_build, project) -> None:  # noqa: ANN001
    result = _invoke(project, "full", input="3\n")

    assert result.exit_code == 1
    assert builds_on_npm_build.ran("npm", "run", "build")
    assert not builds_on_npm_build.ran("netlify")
    assert _archives(project) == []


def test_verify_command(fake_runner, project) -> None:  # noqa: ANN001, ARG001
    make_build(project / "web-dashboard")

    assert _invoke(project, "verify").exit_code == 0


def test_check_reports_and_exit_code(fake_runner, project) -> None:  # noqa: ANN001
    result = _invoke(project, "check")
    assert result.exit_code == 0
    assert "# Deploy pre-check" in result.output

    fake_runner.missing.add("npm")
    result = _invoke(project, "check", "-a")
    assert result.exit_code == 1
    assert "Critical issues" in result.output


def test_env_deploy_file_is_honoured(fake_runner, project, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001, ARG001
    (project / "admin-ui").mkdir()
    (project / ".env.deploy").write_text("DASHBOARD_DIR=admin-ui\n", encoding="utf-8")
    # load_dotenv 가 바꾼 값을 테스트 종료 시 되돌리기 위해 미리 등록
    monkeypatch.setenv("DASHBOARD_DIR", "placeholder")

    result = _invoke(project, "setup")

    assert result.exit_code == 0
    assert (project / "admin-ui" / ".env.production").exists()
    assert not (project / "web-dashboard" / ".env.production").exists()


def test_invalid_config_exits_1(fake_runner, project, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ANN001
    monkeypatch.setenv("MIN_NODE_VERSION", "latest")

    result = _invoke(project, "setup")

    assert result.exit_code == 1
    assert "MIN_NODE_VERSION" in result.output
    assert fake_runner.calls == []


@pytest.mark.parametrize("flag", ["-h", "--help"])
def test_short_and_long_help_flags(project, flag: str) -> None:  # noqa: ANN001
    result = _invoke(project, flag)

    assert result.exit_code == 0
    assert "Usage" in result.output
