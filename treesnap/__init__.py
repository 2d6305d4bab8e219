"""treesnap: snapshot a source tree into one Markdown document.

The library surface lives in ``treesnap.snapshot`` (``build_snapshot``,
``write_snapshot``); ``main`` runs the command-line interface.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Run the CLI; imported on first call so library users skip argparse setup."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
