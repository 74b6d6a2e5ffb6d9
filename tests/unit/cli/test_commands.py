"""Tests for the Typer command surface."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from wocker_pgsql.cli import app
from wocker_pgsql.core.service import Service
from wocker_pgsql.core.store import JsonRegistryStore

runner = CliRunner()


@pytest.fixture
def invoke(cli_context):
    def _invoke(*args: str):
        return runner.invoke(app, list(args), obj=cli_context)

    with patch("wocker_pgsql.cli.configure_logging"):
        yield _invoke


@pytest.fixture
def seeded(cli_context):
    registry = cli_context.registry
    registry.set_service(Service(name="a", user="app", password="pw"))
    registry.set_service(Service(name="b", storage="volume"))
    registry.save()
    return registry


def _reload(cli_context):
    return JsonRegistryStore(cli_context.settings.paths.registry_file).load()


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("create", "start", "backup", "delete-backup", "ls"):
        assert command in result.output


def test_create(invoke, cli_context):
    result = invoke(
        "create", "main", "--user", "app", "--password", "secret",
        "--storage", "filesystem", "--container-port", "5433",
    )

    assert result.exit_code == 0
    service = _reload(cli_context).get_service("main")
    assert service.container_port == 5433


def test_start_refreshes_admin(invoke, seeded, fake_controller, mock_console):
    result = invoke("start")

    assert result.exit_code == 0
    assert fake_controller.containers["pgsql-a.ws"].running
    mock_console.info.assert_any_call("Can't start admin, credentials missing")


def test_start_with_restart(invoke, seeded, fake_controller):
    fake_controller.add_container("pgsql-b.ws")

    result = invoke("start", "b", "--restart")

    assert result.exit_code == 0
    assert fake_controller.removed == ["pgsql-b.ws"]
    assert fake_controller.volumes == {"wocker-pgsql-b"}


def test_restart(invoke, seeded, fake_controller):
    fake_controller.add_container("pgsql-a.ws")

    result = invoke("restart")

    assert result.exit_code == 0
    assert fake_controller.created == ["pgsql-a.ws"]


def test_stop(invoke, seeded, fake_controller):
    fake_controller.add_container("pgsql-b.ws")

    result = invoke("stop", "b")

    assert result.exit_code == 0
    assert "pgsql-b.ws" not in fake_controller.containers


def test_destroy_default_fails(invoke, seeded, cli_context):
    result = invoke("destroy", "a", "--yes")

    assert result.exit_code == 1
    assert "Can't delete default service." in result.output
    assert _reload(cli_context).has_service("a")


def test_destroy(invoke, seeded, cli_context, fake_controller):
    fake_controller.volumes.add("wocker-pgsql-b")

    result = invoke("destroy", "b", "-y")

    assert result.exit_code == 0
    assert not _reload(cli_context).has_service("b")
    assert fake_controller.volumes == set()


def test_unknown_service(invoke, seeded):
    result = invoke("default", "nope")

    assert result.exit_code == 1
    assert 'Service "nope" not found' in result.output


def test_default(invoke, seeded, cli_context):
    result = invoke("default", "b")

    assert result.exit_code == 0
    assert _reload(cli_context).default == "b"


def test_upgrade(invoke, seeded, cli_context):
    result = invoke("upgrade", "a", "--image-version", "16")

    assert result.exit_code == 0
    assert _reload(cli_context).get_service("a").image == "postgres:16"


def test_ls(invoke, seeded, mock_console):
    result = invoke("ls")

    assert result.exit_code == 0
    mock_console.print.assert_called_once()


def test_init(invoke, cli_context):
    result = invoke(
        "init", "--enable", "--email", "me@example.com", "--password", "pw",
        "--skip-password",
    )

    assert result.exit_code == 0
    admin = _reload(cli_context).admin
    assert admin.email == "me@example.com"
    assert admin.skip_password is True


def test_admin(invoke, seeded, cli_context, fake_controller):
    cli_context.registry.admin.email = "me@example.com"
    cli_context.registry.admin.password = "pw"
    fake_controller.add_container("pgsql-a.ws")

    result = invoke("admin")

    assert result.exit_code == 0
    assert fake_controller.containers["dbadmin-pgsql.workspace"].running


def test_psql_exit_code(invoke, seeded, fake_controller):
    fake_controller.add_container("pgsql-a.ws")
    fake_controller.interactive_exit_code = 2

    result = invoke("psql")

    assert result.exit_code == 2


def test_psql_requires_running_service(invoke, seeded):
    result = invoke("psql", "a")

    assert result.exit_code == 1
    assert "isn't started" in result.output


def test_backup_and_restore(invoke, seeded, fake_controller, settings):
    fake_controller.add_container("pgsql-a.ws")
    fake_controller.stream_stdout = b"SELECT 1;\n"

    backup = invoke("backup", "a", "app", "snap.sql")
    restore = invoke("restore", "a", "app", "snap.sql")

    assert backup.exit_code == 0
    assert restore.exit_code == 0
    assert fake_controller.streamed_input == b"SELECT 1;\n"


def test_restore_failure_exits_non_zero(invoke, seeded, fake_controller, settings):
    fake_controller.add_container("pgsql-a.ws")
    dump_dir = settings.paths.service_dump_dir("a", "app")
    dump_dir.mkdir(parents=True)
    (dump_dir / "bad.sql").write_text("BROKEN;")
    fake_controller.stream_exit_code = 3

    result = invoke("restore", "a", "app", "bad.sql")

    assert result.exit_code == 1
    assert "Restore failed with exit code 3" in result.output


def test_backups_and_delete(invoke, seeded, settings):
    dump_dir = settings.paths.service_dump_dir("a", "app")
    dump_dir.mkdir(parents=True)
    (dump_dir / "old.sql").write_text("")

    listing = invoke("backups", "a")
    deleted = invoke("delete-backup", "a", "app", "old.sql", "--yes")

    assert listing.exit_code == 0
    assert deleted.exit_code == 0
    assert not (dump_dir / "old.sql").exists()
