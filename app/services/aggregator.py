"""Bottom-up coverage aggregation for a single series."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .coverage import LeafClassifier, combine_statuses
from .tree import BatchSink, ContentNode, StatusSnapshot, UpdateKind

logger = logging.getLogger(__name__)


class ScanError(RuntimeError):
    """Terminal failure of a dub/sub scan."""


class PersistenceError(ScanError):
    """Raised when a batch of changed items could not be stored."""


class ScanTimeoutError(ScanError):
    """Raised when a scan runs past its configured deadline."""


@dataclass(slots=True)
class SeriesResult:
    """Outcome of aggregating one series."""

    series: ContentNode
    season_count: int = 0
    episode_count: int = 0
    changed: bool = False


class TreeAggregator:
    """Recomputes coverage for one series and writes only what changed.

    Episodes are classified from their stream languages, seasons combine their
    episodes and the series combines its seasons. Changed episodes are
    persisted per season and changed seasons per series. The series itself is
    only reported as changed; its parent decides when to persist it.
    """

    def __init__(self, classifier: LeafClassifier, sink: BatchSink):
        self._classifier = classifier
        self._sink = sink

    async def aggregate_series(self, series: ContentNode) -> SeriesResult:
        snapshot = StatusSnapshot.capture([series])
        result = SeriesResult(series=series)
        changed_seasons: list[ContentNode] = []

        logger.info("Scanning series: %s", series.name)
        for season in series.seasons():
            logger.info("[%s] Scanning season: %s", series.name, season.name)
            result.season_count += 1
            episodes = season.episodes()
            changed_episodes: list[ContentNode] = []

            for episode in episodes:
                logger.debug(
                    "[%s] > [%s] Scanning episode: %s",
                    series.name,
                    season.name,
                    episode.name,
                )
                result.episode_count += 1
                self._classify_episode(episode)
                if snapshot.changed(episode):
                    changed_episodes.append(episode)

            if episodes:
                self._combine_into(season, episodes)
                if snapshot.changed(season):
                    changed_seasons.append(season)

            if changed_episodes:
                await self.persist(changed_episodes, season)

        self._combine_into(series, series.seasons())
        result.changed = snapshot.changed(series)

        if changed_seasons:
            await self.persist(changed_seasons, series)
        return result

    async def persist(
        self,
        nodes: Sequence[ContentNode],
        context: ContentNode,
        kind: UpdateKind = UpdateKind.METADATA_EDIT,
    ) -> None:
        """Hand a batch of changed siblings to the sink."""

        logger.debug(
            "Persisting %d changed item(s) under %s (%s)",
            len(nodes),
            context.name or context.id,
            kind.value,
        )
        try:
            await self._sink.apply_batch(list(nodes), context, kind)
        except ScanError:
            raise
        except Exception as exc:
            logger.exception(
                "Failed to persist %d item(s) under %s", len(nodes), context.id
            )
            raise PersistenceError(
                f"Failed to persist {len(nodes)} changed item(s) under {context.id}"
            ) from exc

    def _classify_episode(self, episode: ContentNode) -> None:
        coverage = self._classifier.classify(
            episode.audio_languages, episode.subtitle_languages
        )
        episode.dub_status = coverage.dub_status
        episode.sub_status = coverage.sub_status

    @staticmethod
    def _combine_into(parent: ContentNode, children: Sequence[ContentNode]) -> None:
        # Children never assigned a value on an axis are left out of that axis.
        dubbed = [child.dub_status for child in children if child.dub_status is not None]
        subbed = [child.sub_status for child in children if child.sub_status is not None]
        if dubbed:
            parent.dub_status = combine_statuses(dubbed)
        if subbed:
            parent.sub_status = combine_statuses(subbed)
