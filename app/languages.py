"""Built-in target language presets for coverage scans."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LanguagePreset:
    """Describes a target language and the stream tags that identify it."""

    key: str
    aliases: tuple[str, ...]


LANGUAGE_PRESETS: tuple[LanguagePreset, ...] = (
    LanguagePreset(
        key="english",
        aliases=("en", "eng", "en-us", "en-gb", "en-ca", "en-au", "en-in", "english"),
    ),
    LanguagePreset(
        key="japanese",
        aliases=("ja", "jpn", "ja-jp", "japanese"),
    ),
    LanguagePreset(
        key="german",
        aliases=("de", "deu", "ger", "de-de", "de-at", "de-ch", "german"),
    ),
    LanguagePreset(
        key="french",
        aliases=("fr", "fra", "fre", "fr-fr", "fr-ca", "french"),
    ),
    LanguagePreset(
        key="spanish",
        aliases=("es", "spa", "es-es", "es-mx", "es-419", "spanish"),
    ),
)


LANGUAGE_PRESET_KEYS: tuple[str, ...] = tuple(preset.key for preset in LANGUAGE_PRESETS)


def get_language_preset(key: str) -> LanguagePreset:
    """Return the preset registered under ``key``."""

    for preset in LANGUAGE_PRESETS:
        if preset.key == key:
            return preset
    raise KeyError(key)
