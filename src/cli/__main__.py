# =============================================================================
# src/cli/__main__.py: package entry point
# =============================================================================
#
#     python -m src.cli generate --user <id>
#
# Delegates to the recommendation CLI (recommend.py).
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.recommend import main

main()
