"""Leaf classification and status combination behaviour."""

from __future__ import annotations

import itertools
import random

import pytest

from app.services.coverage import (
    CoverageStatus,
    LeafClassifier,
    TargetLanguageConfig,
    combine_statuses,
)

ALL_STATUSES = tuple(CoverageStatus)


def _expected(values: tuple[CoverageStatus, ...]) -> CoverageStatus:
    if set(values) == {CoverageStatus.FULL}:
        return CoverageStatus.FULL
    if set(values) == {CoverageStatus.NONE}:
        return CoverageStatus.NONE
    return CoverageStatus.PARTIAL


@pytest.mark.parametrize("length", [1, 2, 3, 4])
def test_combine_matches_rule_for_every_sequence(length: int) -> None:
    for values in itertools.product(ALL_STATUSES, repeat=length):
        assert combine_statuses(values) == _expected(values)


def test_combine_accepts_raw_integers() -> None:
    assert combine_statuses([2, 2]) is CoverageStatus.FULL
    assert combine_statuses([0, 0, 0]) is CoverageStatus.NONE
    assert combine_statuses([0, 2]) is CoverageStatus.PARTIAL


def test_combine_is_permutation_invariant() -> None:
    rng = random.Random(1234)
    for _ in range(200):
        values = [rng.choice(ALL_STATUSES) for _ in range(rng.randint(1, 8))]
        shuffled = values[:]
        rng.shuffle(shuffled)
        assert combine_statuses(values) == combine_statuses(shuffled)


@pytest.mark.parametrize("status", list(CoverageStatus))
def test_combine_singleton_returns_its_value(status: CoverageStatus) -> None:
    assert combine_statuses([status]) is status


def test_partial_child_forces_partial() -> None:
    assert combine_statuses([CoverageStatus.PARTIAL]) is CoverageStatus.PARTIAL
    assert (
        combine_statuses([CoverageStatus.FULL, CoverageStatus.PARTIAL])
        is CoverageStatus.PARTIAL
    )


def test_combine_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        combine_statuses([])


@pytest.mark.parametrize("tag", ["EN", "en-US", "ENGLISH", " eng ", "en-gb"])
def test_classifier_matches_english_aliases(tag: str) -> None:
    coverage = LeafClassifier().classify([tag], [])

    assert coverage.has_target_audio is True
    assert coverage.has_target_subtitle is False
    assert coverage.dub_status is CoverageStatus.FULL
    assert coverage.sub_status is CoverageStatus.NONE


def test_classifier_rejects_other_languages() -> None:
    coverage = LeafClassifier().classify(["fr", "jpn"], ["de"])

    assert coverage.has_target_audio is False
    assert coverage.has_target_subtitle is False


@pytest.mark.parametrize("audio", [None, [], ["", "   "]])
def test_classifier_treats_missing_tags_as_false(audio) -> None:
    coverage = LeafClassifier().classify(audio, None)

    assert coverage.has_target_audio is False
    assert coverage.has_target_subtitle is False


def test_classifier_checks_axes_independently() -> None:
    coverage = LeafClassifier().classify(["jpn"], ["jpn", "eng"])

    assert coverage.dub_status is CoverageStatus.NONE
    assert coverage.sub_status is CoverageStatus.FULL


def test_classifier_uses_configured_aliases() -> None:
    classifier = LeafClassifier(TargetLanguageConfig.from_aliases(["JA", "jpn"]))

    assert classifier.classify(["jpn"], []).has_target_audio is True
    assert classifier.classify(["eng"], []).has_target_audio is False
    assert classifier.config.matches("Ja")
