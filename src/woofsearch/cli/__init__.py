"""Command-line interface for the Woofadaar search API.

Usage:
    woofsearch search "vaccination"             # Search everything
    woofsearch search -t partners "vet"         # Partners only
    woofsearch config                           # Show configuration
"""

from woofsearch.cli.main import app

__all__ = ["app"]
