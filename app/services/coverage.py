"""Leaf classification and tri-state combination for language coverage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from ..languages import get_language_preset
from ..utils import distinct_language_tags, normalize_language_tag


class CoverageStatus(IntEnum):
    """Per-axis coverage stored on every library item."""

    NONE = 0
    PARTIAL = 1
    FULL = 2


@dataclass(frozen=True)
class TargetLanguageConfig:
    """The set of stream language tags that count as the target language."""

    aliases: frozenset[str]

    @classmethod
    def from_aliases(cls, aliases: Iterable[str]) -> "TargetLanguageConfig":
        return cls(aliases=distinct_language_tags(aliases))

    @classmethod
    def english(cls) -> "TargetLanguageConfig":
        return cls.from_aliases(get_language_preset("english").aliases)

    def matches(self, tag: str) -> bool:
        return normalize_language_tag(tag) in self.aliases


@dataclass(frozen=True, slots=True)
class LeafCoverage:
    """Classification of a single episode."""

    has_target_audio: bool
    has_target_subtitle: bool

    @property
    def dub_status(self) -> CoverageStatus:
        return CoverageStatus.FULL if self.has_target_audio else CoverageStatus.NONE

    @property
    def sub_status(self) -> CoverageStatus:
        return CoverageStatus.FULL if self.has_target_subtitle else CoverageStatus.NONE


class LeafClassifier:
    """Decides whether an episode carries target-language audio and subtitles."""

    def __init__(self, config: TargetLanguageConfig | None = None):
        self._config = config or TargetLanguageConfig.english()

    @property
    def config(self) -> TargetLanguageConfig:
        return self._config

    def classify(
        self,
        audio_languages: Iterable[str] | None,
        subtitle_languages: Iterable[str] | None,
    ) -> LeafCoverage:
        """Return the coverage booleans for one leaf's stream language tags.

        Missing or empty tag sets are not an error, they classify as
        ``False``.
        """

        return LeafCoverage(
            has_target_audio=self._has_target(audio_languages),
            has_target_subtitle=self._has_target(subtitle_languages),
        )

    def _has_target(self, languages: Iterable[str] | None) -> bool:
        tags = distinct_language_tags(languages)
        return bool(tags) and any(tag in self._config.aliases for tag in tags)


def combine_statuses(statuses: Iterable[CoverageStatus | int]) -> CoverageStatus:
    """Fold child statuses into the parent's status.

    ``FULL`` when every child is ``FULL``, ``NONE`` when every child is
    ``NONE`` and ``PARTIAL`` for anything mixed (or any ``PARTIAL`` child).
    """

    values = [CoverageStatus(status) for status in statuses]
    if not values:
        raise ValueError("Cannot combine an empty sequence of statuses")
    if all(value == CoverageStatus.FULL for value in values):
        return CoverageStatus.FULL
    if all(value == CoverageStatus.NONE for value in values):
        return CoverageStatus.NONE
    return CoverageStatus.PARTIAL
