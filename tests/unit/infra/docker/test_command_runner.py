"""Tests for the subprocess command runner."""

import io
import sys

from wocker_pgsql.infra.docker.runner import CommandRunner


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_run_captures_output():
    result = CommandRunner().run(_python("print('hello')"))

    assert result.success
    assert result.stdout.strip() == "hello"


def test_run_reports_failure():
    result = CommandRunner().run(
        _python("import sys; sys.stderr.write('bad'); sys.exit(3)")
    )

    assert not result.success
    assert result.returncode == 3
    assert result.stderr == "bad"


def test_run_forwards_extra_environment():
    result = CommandRunner().run(
        _python("import os; print(os.environ['PGPASSWORD'])"),
        env={"PGPASSWORD": "s3cret"},
    )

    assert result.stdout.strip() == "s3cret"


def test_run_piped_keeps_channels_apart():
    code = (
        "import sys\n"
        "for i in range(200):\n"
        "    sys.stdout.buffer.write(b'out-%d\\n' % i)\n"
        "    sys.stderr.buffer.write(b'err-%d\\n' % i)\n"
    )
    stdout, stderr = io.BytesIO(), io.BytesIO()

    exit_code = CommandRunner(chunk_size=64).run_piped(
        _python(code), stdout=stdout, stderr=stderr
    )

    assert exit_code == 0
    assert stdout.getvalue() == b"".join(b"out-%d\n" % i for i in range(200))
    assert stderr.getvalue() == b"".join(b"err-%d\n" % i for i in range(200))


def test_run_piped_feeds_stdin_and_discards_stdout():
    payload = bytes(range(256)) * 1024
    code = (
        "import sys\n"
        "data = sys.stdin.buffer.read()\n"
        "sys.stdout.buffer.write(data)\n"
        "sys.stderr.buffer.write(str(len(data)).encode())\n"
    )
    stderr = io.BytesIO()

    exit_code = CommandRunner().run_piped(
        _python(code), stdin=io.BytesIO(payload), stdout=None, stderr=stderr
    )

    assert exit_code == 0
    assert stderr.getvalue() == str(len(payload)).encode()


def test_run_piped_returns_exit_code():
    exit_code = CommandRunner().run_piped(_python("import sys; sys.exit(5)"))

    assert exit_code == 5


def test_run_piped_tolerates_early_exit():
    exit_code = CommandRunner().run_piped(
        _python("import sys; sys.exit(1)"),
        stdin=io.BytesIO(b"x" * (4 * 1024 * 1024)),
    )

    assert exit_code == 1
