"""HTTP API for the search engine."""
