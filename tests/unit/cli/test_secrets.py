"""Tests for password prompting."""

from unittest.mock import Mock

import pytest

from wocker_pgsql.cli.shared.console import CLIConsole
from wocker_pgsql.cli.shared.secrets import get_password
from wocker_pgsql.core.errors import ServiceValidationError


@pytest.fixture
def console():
    return Mock(spec=CLIConsole)


def test_password_from_environment(console, monkeypatch):
    monkeypatch.setenv("PG_TEST_PASSWORD", "from-env")

    assert get_password(console, "Password", "PG_TEST_PASSWORD") == "from-env"
    console.prompt_password.assert_not_called()


def test_confirmed_password(console):
    console.prompt_password.side_effect = ["secret", "secret"]

    assert get_password(console, "Password") == "secret"


def test_mismatch_retries(console):
    console.prompt_password.side_effect = ["secret", "other", "secret", "secret"]

    assert get_password(console, "Password") == "secret"
    console.error.assert_called_once_with("Passwords do not match")


def test_short_password_retries(console):
    console.prompt_password.side_effect = ["abc", "long enough", "long enough"]

    assert get_password(console, "Password") == "long enough"


def test_gives_up(console):
    console.prompt_password.side_effect = ["aaaa", "bbbb"] * 3

    with pytest.raises(ServiceValidationError):
        get_password(console, "Password")
