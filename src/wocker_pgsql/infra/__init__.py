"""Infrastructure: container runtime and PostgreSQL operations."""
