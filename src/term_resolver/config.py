"""Configuration loading and management for term-resolver.

All matching thresholds, disambiguation boosts, cache lifetimes and request
limits live in one pydantic model so they can be tuned per deployment
without touching the matchers.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from term_resolver.errors import ConfigurationError, ResourceError


class MatchingConfig(BaseModel):
    """Thresholds and limits for matching, caching and disambiguation."""

    # Matcher thresholds
    fuzzy_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    phonetic_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    # Single-best lookups stop at the first matcher clearing this bar
    good_enough_confidence: float = Field(default=0.9, ge=0.0, le=1.0)

    # Per-operation minimum confidences
    validate_min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    search_min_confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    ambiguity_min_confidence: float = Field(default=0.4, ge=0.0, le=1.0)

    # Disambiguation
    ambiguity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    faction_hint_boost: float = Field(default=0.2, ge=0.0, le=1.0)
    context_boost: float = Field(default=0.15, ge=0.0, le=1.0)
    max_context_chars: int = Field(default=500, gt=0)
    ambiguity_limit: int = Field(default=10, gt=0)

    # Request limits
    max_batch_terms: int = Field(default=50, gt=0)
    validate_limit: int = Field(default=5, gt=0)
    default_search_limit: int = Field(default=5, gt=0)
    max_search_limit: int = Field(default=20, gt=0)

    # Candidate cache lifetime in seconds
    cache_ttl_seconds: float = Field(default=300.0, gt=0.0)


def load_matching_config(path: Path | str | None = None) -> MatchingConfig:
    """Load matching configuration from a JSON file.

    Args:
        path: Path to the JSON file; defaults are returned when omitted

    Returns:
        MatchingConfig object

    Raises:
        ResourceError: If the config file doesn't exist
        ConfigurationError: If the file is not valid JSON or has bad values
    """
    if path is None:
        return MatchingConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ResourceError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Config file is not valid JSON: {config_path}",
            context={"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must hold a JSON object: {config_path}")

    try:
        return MatchingConfig(**data)
    except PydanticValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(
            f"Invalid matching config: {config_path}",
            context={"fields": fields},
        ) from e


def save_matching_config(path: Path | str, config: MatchingConfig) -> Path:
    """Save matching configuration to JSON with an atomic write.

    Args:
        path: Destination file
        config: Configuration to save

    Returns:
        Path to the saved config file
    """
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(config_path.suffix + ".tmp")

    # Atomic write: write to temp file, then rename
    with open(temp_path, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(), f, indent=2)

    temp_path.replace(config_path)
    return config_path
