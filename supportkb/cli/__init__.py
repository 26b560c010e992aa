# =============================================================================
# supportkb/cli/__init__.py - CLI Module Overview
# =============================================================================
#
# Command-line access to the knowledge base for operators, outside the
# admin UI.  ingest.py builds the same services the API uses and exposes
# them as argparse subcommands (url, document, list, delete, search).
#
# Heavy imports (chromadb, openai) are deferred inside functions to keep
# `--help` fast.
# =============================================================================

"""CLI tools for supportKB.

- ``python -m supportkb.cli`` (or ``python -m supportkb.cli.ingest``):
  add, list, delete and search knowledge-base content.
"""
