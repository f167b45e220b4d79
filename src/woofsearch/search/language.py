"""Language data used by query normalization, term expansion and suggestions.

The tables live in a JSON resource so new languages and synonyms can be added
without touching the matching code. The bundled file is
``woofsearch/search/data/language_resources.json``.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from woofsearch.search.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RESOURCES_PATH = Path(__file__).parent / "data" / "language_resources.json"


class LanguageResources(BaseModel):
    """Synonym, transliteration and suggestion tables.

    Attributes:
        default_language: Language whose suggestions are used for unknown languages
        synonyms: Term -> extra terms added during term extraction
        transliterations: Language -> (script term -> Latin equivalents)
        predefined_suggestions: Language -> canned query suggestions
    """

    model_config = ConfigDict(frozen=True)

    default_language: str = "en"
    synonyms: dict[str, list[str]] = Field(default_factory=dict)
    transliterations: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    predefined_suggestions: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "LanguageResources":
        """Load language tables from a JSON file.

        Args:
            path: Resource file (default: bundled resources)

        Returns:
            Parsed LanguageResources

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        resource_path = Path(path) if path else DEFAULT_RESOURCES_PATH

        try:
            raw = resource_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read language resources {resource_path}: {e}") from e

        try:
            resources = cls.model_validate_json(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid language resources {resource_path}: {e}") from e

        logger.info(
            f"Loaded language resources from {resource_path} "
            f"({len(resources.synonyms)} synonyms, "
            f"{len(resources.transliterations)} transliteration tables)"
        )
        return resources

    def transliterations_for(self, language: str | None) -> dict[str, list[str]]:
        """Script term table for a language (empty if none)."""
        return self.transliterations.get(language or self.default_language, {})

    def suggestions_for(self, language: str | None) -> list[str]:
        """Predefined suggestions, falling back to the default language."""
        if language and language in self.predefined_suggestions:
            return self.predefined_suggestions[language]
        return self.predefined_suggestions.get(self.default_language, [])


@lru_cache
def get_default_resources() -> LanguageResources:
    """Get the cached bundled language resources."""
    return LanguageResources.load()
