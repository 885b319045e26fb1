"""Tests for matching configuration loading."""

import json

import pytest

from term_resolver.config import MatchingConfig, load_matching_config, save_matching_config
from term_resolver.errors import ConfigurationError, ResourceError


class TestMatchingConfig:
    """Tests for MatchingConfig defaults and validation."""

    def test_defaults(self):
        """Test default thresholds and limits."""
        config = MatchingConfig()

        assert config.fuzzy_threshold == 0.7
        assert config.phonetic_threshold == 0.5
        assert config.ambiguity_threshold == 0.7
        assert config.faction_hint_boost == 0.2
        assert config.context_boost == 0.15
        assert config.max_context_chars == 500
        assert config.max_batch_terms == 50
        assert config.max_search_limit == 20
        assert config.cache_ttl_seconds == 300.0

    def test_threshold_out_of_range(self):
        """Thresholds must lie in [0, 1]."""
        with pytest.raises(ValueError):
            MatchingConfig(fuzzy_threshold=1.5)


class TestLoadMatchingConfig:
    """Tests for load_matching_config and save_matching_config."""

    def test_no_path_gives_defaults(self):
        """Omitting the path returns defaults."""
        assert load_matching_config() == MatchingConfig()

    def test_missing_file(self, tmp_path):
        """A missing file is a resource error."""
        with pytest.raises(ResourceError):
            load_matching_config(tmp_path / "missing.json")

    def test_partial_file(self, tmp_path):
        """Unspecified fields keep their defaults."""
        path = tmp_path / "matching.json"
        path.write_text(json.dumps({"fuzzy_threshold": 0.8}))

        config = load_matching_config(path)

        assert config.fuzzy_threshold == 0.8
        assert config.phonetic_threshold == 0.5

    def test_invalid_json(self, tmp_path):
        """Unparseable files are configuration errors."""
        path = tmp_path / "matching.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            load_matching_config(path)

    def test_not_an_object(self, tmp_path):
        """A JSON list is not a config."""
        path = tmp_path / "matching.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError):
            load_matching_config(path)

    def test_invalid_value(self, tmp_path):
        """Out-of-range values name the offending field."""
        path = tmp_path / "matching.json"
        path.write_text(json.dumps({"ambiguity_threshold": 2.0}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_matching_config(path)

        assert "ambiguity_threshold" in exc_info.value.context["fields"]

    def test_save_and_load(self, tmp_path):
        """Saved configs load back unchanged."""
        config = MatchingConfig(fuzzy_threshold=0.75, max_batch_terms=10)
        path = save_matching_config(tmp_path / "nested" / "matching.json", config)

        assert path.exists()
        assert not path.with_suffix(".json.tmp").exists()
        assert load_matching_config(path) == config
