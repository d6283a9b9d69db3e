"""CLI command implementations. Each run_* function returns a process exit code."""
