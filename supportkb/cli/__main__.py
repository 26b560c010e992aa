# =============================================================================
# supportkb/cli/__main__.py - Package Entry Point
# =============================================================================
#
# Enables `python -m supportkb.cli`, which runs the knowledge-base CLI
# (ingest.py).
# =============================================================================

"""Allow ``python -m supportkb.cli`` execution."""

from supportkb.cli.ingest import main

main()
