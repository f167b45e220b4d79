"""Woofadaar search: multi-language, relevance-ranked search for a pet-care platform.

Searches community questions, partner profiles and per-user dog health logs,
merges and ranks the results, and serves them over a FastAPI HTTP API and a
Typer CLI.
"""

__version__ = "0.1.0"
