"""modelbundle CLI — Typer-based command-line interface.

Provides the ``modelbundle`` command with subcommands for installing
bundled model specs, checking their status, inspecting part sequences
and splitting large artifacts into parts.

All output uses Rich for formatted terminal display.
"""
