"""Entry point for `python -m histrack`.

Usage:
    python -m histrack process my-repo repo.json --entity-type repository --config change.json
    python -m histrack changes my-repo --type full --limit 20
"""

from __future__ import annotations

from histrack.cli import cli

cli()
