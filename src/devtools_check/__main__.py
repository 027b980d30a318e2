from __future__ import annotations

from devtools_check.cli import cli

if __name__ == "__main__":  # pragma: no cover
    cli()
