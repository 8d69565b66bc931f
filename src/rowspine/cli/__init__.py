"""
rowspine command-line interface.

Usage::

    rowspine tables -d sqlite:///data/app.db
    rowspine show users 42 --json
    rowspine find users role=admin deleted_at=NULL --limit 10
"""

from rowspine.cli.app import app

__all__ = ["app"]
