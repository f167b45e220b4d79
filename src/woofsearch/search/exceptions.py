"""Exceptions raised by the search engine and its collaborators."""


class WoofSearchError(Exception):
    """Base class for search errors."""


class SearchCapabilityNotImplementedError(WoofSearchError, NotImplementedError):
    """A search modality that is declared but permanently unavailable."""

    def __init__(self, capability: str):
        self.capability = capability
        super().__init__(f"{capability} search not implemented yet")


class DataSourceError(WoofSearchError):
    """A record store could not answer a query."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Data source '{source}' failed: {message}")


class ConfigurationError(WoofSearchError):
    """Invalid configuration or language resource data."""
