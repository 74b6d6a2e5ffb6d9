"""Shared helpers that do not depend on the CLI layer."""
