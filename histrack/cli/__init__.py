"""histrack command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``histrack`` script).
"""

from histrack.cli.main import cli

__all__ = ["cli"]
