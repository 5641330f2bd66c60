"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest

from app.config import Settings
from app.languages import get_language_preset
from app.services.tree import ContentNode, NodeKind


def _collection(name: str) -> ContentNode:
    return ContentNode(id=name.lower(), kind=NodeKind.COLLECTION, name=name)


def test_defaults_to_english_aliases() -> None:
    settings = Settings(_env_file=None)

    assert settings.target_language == "english"
    assert settings.target_language_aliases == get_language_preset("english").aliases
    assert settings.target_language_config.matches("EN-GB")


def test_target_language_preset_is_case_insensitive() -> None:
    settings = Settings(_env_file=None, TARGET_LANGUAGE="Japanese")

    assert settings.target_language == "japanese"
    assert "jpn" in settings.target_language_aliases


def test_unknown_target_language_raises() -> None:
    with pytest.raises(ValueError, match="Unknown target language configured"):
        Settings(_env_file=None, TARGET_LANGUAGE="klingon")


def test_alias_override_is_normalised() -> None:
    settings = Settings(
        _env_file=None, TARGET_LANGUAGE_ALIASES=" EN, eng ,, en ,Pt-BR"
    )

    assert settings.target_language_aliases == ("en", "eng", "pt-br")


def test_blank_alias_override_falls_back_to_preset() -> None:
    settings = Settings(_env_file=None, TARGET_LANGUAGE="german", TARGET_LANGUAGE_ALIASES="")

    assert settings.target_language_aliases == get_language_preset("german").aliases


def test_collection_filter_matches_configured_names() -> None:
    settings = Settings(_env_file=None, SCAN_COLLECTIONS="Anime, Cartoons")
    is_eligible = settings.collection_filter()

    assert settings.scan_collections == ("Anime", "Cartoons")
    assert is_eligible(_collection("anime"))
    assert is_eligible(_collection("Cartoons"))
    assert not is_eligible(_collection("Movies"))


def test_collection_filter_defaults_to_everything() -> None:
    is_eligible = Settings(_env_file=None).collection_filter()

    assert is_eligible(_collection("Movies"))
    assert is_eligible(_collection("TV"))


def test_scan_concurrency_bounds() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, SCAN_CONCURRENCY=0)


def test_environment_lists_are_not_json_decoded(monkeypatch) -> None:
    monkeypatch.setenv("SCAN_COLLECTIONS", "Anime,TV")
    monkeypatch.setenv("TARGET_LANGUAGE_ALIASES", "fr,fra")

    settings = Settings(_env_file=None)

    assert settings.scan_collections == ("Anime", "TV")
    assert settings.target_language_aliases == ("fr", "fra")
