"""Unit tests for language resource loading."""

import json

import pytest

from woofsearch.search.exceptions import ConfigurationError
from woofsearch.search.language import LanguageResources, get_default_resources


class TestLoad:
    """Tests for LanguageResources.load."""

    def test_bundled_resources(self):
        """Should load the bundled tables."""
        resources = LanguageResources.load()

        assert resources.default_language == "en"
        assert "dog" in resources.synonyms
        assert resources.transliterations["hi"]["कुत्ता"][0] == "dog"
        assert "dog health" in resources.predefined_suggestions["en"]

    def test_custom_file(self, tmp_path):
        """Should load tables from a given path."""
        path = tmp_path / "resources.json"
        path.write_text(
            json.dumps({"synonyms": {"cat": ["feline"]}, "predefined_suggestions": {"en": ["cat food"]}}),
            encoding="utf-8",
        )

        resources = LanguageResources.load(path)

        assert resources.synonyms == {"cat": ["feline"]}
        assert resources.transliterations == {}

    def test_missing_file(self, tmp_path):
        """Should raise ConfigurationError for a missing file."""
        with pytest.raises(ConfigurationError, match="Cannot read"):
            LanguageResources.load(tmp_path / "missing.json")

    def test_malformed_file(self, tmp_path):
        """Should raise ConfigurationError for invalid content."""
        path = tmp_path / "bad.json"
        path.write_text('{"synonyms": ["not", "a", "mapping"]}', encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid language resources"):
            LanguageResources.load(path)

    def test_default_resources_cached(self):
        """Should return the same instance on repeated calls."""
        assert get_default_resources() is get_default_resources()


class TestLookups:
    """Tests for per-language lookups."""

    @pytest.fixture
    def resources(self):
        return LanguageResources(
            transliterations={"hi": {"दवा": ["medicine"]}},
            predefined_suggestions={"en": ["dog health"], "hi": ["पशु चिकित्सक"]},
        )

    def test_transliterations_for_known_language(self, resources):
        """Should return the language's table."""
        assert resources.transliterations_for("hi") == {"दवा": ["medicine"]}

    def test_transliterations_for_unknown_language(self, resources):
        """Should return an empty table for other languages."""
        assert resources.transliterations_for("fr") == {}

    def test_suggestions_fall_back_to_default_language(self, resources):
        """Should use the default language's suggestions for unknown languages."""
        assert resources.suggestions_for("fr") == ["dog health"]
        assert resources.suggestions_for(None) == ["dog health"]
        assert resources.suggestions_for("hi") == ["पशु चिकित्सक"]
