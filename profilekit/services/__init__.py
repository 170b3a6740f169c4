"""Runtime service wiring for CLI commands."""
