"""Console, prompts and password helpers shared by commands."""
