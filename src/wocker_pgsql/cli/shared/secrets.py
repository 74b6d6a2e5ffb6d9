"""Utility functions for handling passwords."""

import os

from wocker_pgsql.cli.shared.console import CLIConsole
from wocker_pgsql.core.errors import ServiceValidationError

MIN_PASSWORD_LENGTH = 4


def get_password(
    console: CLIConsole,
    prompt: str,
    env_var: str | None = None,
    *,
    attempts: int = 3,
) -> str:
    """Get a new password from the environment or prompt with confirmation.

    Raises:
        ServiceValidationError: If confirmation keeps failing
    """
    if env_var:
        password = os.environ.get(env_var)
        if password:
            console.print(f"[dim]Using password from {env_var}[/dim]")
            return password

    for _ in range(attempts):
        password = console.prompt_password(prompt)
        if len(password) < MIN_PASSWORD_LENGTH:
            console.error(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
            continue
        if password != console.prompt_password("Confirm password"):
            console.error("Passwords do not match")
            continue
        return password

    raise ServiceValidationError("Passwords do not match")
