# =============================================================================
# src/cli/__init__.py: CLI Module Overview
# =============================================================================
#
# Standalone command-line tools for gameScout, run via
# `python -m src.cli.<module>`.
#
#   RECOMMEND (recommend.py)
#      Generates a fresh recommendation set for a user, or prints the
#      latest stored one, using the same orchestrator as the API.
#
# Architecture Notes:
#   - argparse for argument parsing (not Click/Typer).
#   - src.main is imported inside the command so --help stays fast and
#     logging can be re-pointed at stderr first.
# =============================================================================

"""CLI tools for the gameScout recommendation pipeline.

- ``python -m src.cli.recommend generate --user <id>``: fresh picks.
- ``python -m src.cli.recommend latest --user <id>``: the stored picks.
"""
