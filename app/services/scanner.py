"""Scan orchestration across library collections."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Iterable

from ..models import ScanSummary
from .aggregator import ScanTimeoutError, SeriesResult, TreeAggregator
from .coverage import LeafClassifier
from .tree import BatchSink, ContentNode

logger = logging.getLogger(__name__)

CollectionFilter = Callable[[ContentNode], bool]
TreeLoader = Callable[[ContentNode], Awaitable[ContentNode]]


class DubSubScanner:
    """Runs the tree aggregator over every eligible collection.

    Collections rejected by the filter are neither traversed nor counted. When
    a ``tree_loader`` is supplied, collections are passed in as bare roots and
    only eligible ones are expanded into full trees.
    """

    def __init__(
        self,
        classifier: LeafClassifier,
        sink: BatchSink,
        *,
        concurrency: int = 1,
        timeout_seconds: float | None = None,
        tree_loader: TreeLoader | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._aggregator = TreeAggregator(classifier, sink)
        self._concurrency = concurrency
        self._timeout_seconds = timeout_seconds
        self._tree_loader = tree_loader
        self._clock = clock

    async def run(
        self,
        collections: Iterable[ContentNode],
        collection_filter: CollectionFilter | None = None,
    ) -> ScanSummary:
        deadline = (
            self._clock() + self._timeout_seconds
            if self._timeout_seconds is not None
            else None
        )
        summary = ScanSummary()

        for collection in collections:
            if collection_filter is not None and not collection_filter(collection):
                logger.debug("Skipping collection %s", collection.name)
                continue
            if self._tree_loader is not None:
                collection = await self._tree_loader(collection)

            logger.info("Scanning collection: %s", collection.name)
            results = await self._scan_collection(collection, deadline)
            for result in results:
                summary.record(result)

            changed_series = [result.series for result in results if result.changed]
            if changed_series:
                await self._aggregator.persist(changed_series, collection)

        return summary

    async def _scan_collection(
        self, collection: ContentNode, deadline: float | None
    ) -> list[SeriesResult]:
        series_nodes = collection.series()
        if self._concurrency == 1:
            results: list[SeriesResult] = []
            for series in series_nodes:
                self._check_deadline(deadline)
                results.append(await self._aggregator.aggregate_series(series))
            return results

        semaphore = asyncio.Semaphore(self._concurrency)

        async def _worker(series: ContentNode) -> SeriesResult:
            async with semaphore:
                self._check_deadline(deadline)
                return await self._aggregator.aggregate_series(series)

        tasks = [asyncio.create_task(_worker(series)) for series in series_nodes]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def _check_deadline(self, deadline: float | None) -> None:
        if deadline is not None and self._clock() >= deadline:
            raise ScanTimeoutError("Scan exceeded its configured timeout")
