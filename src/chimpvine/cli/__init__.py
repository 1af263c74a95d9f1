"""Command-line harness for running a game session against a backend."""
