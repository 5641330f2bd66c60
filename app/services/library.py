"""Library storage access and the scan entry point used by the API."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import Settings
from ..db_models import MediaItem, MediaStream, User
from ..models import GroupingOption, ScanSummary, UserView
from ..utils import distinct_language_tags
from .aggregator import ScanError
from .coverage import CoverageStatus, LeafClassifier
from .scanner import DubSubScanner
from .tree import ContentNode, NodeKind, UpdateKind

logger = logging.getLogger(__name__)

GROUPABLE_COLLECTION_TYPES = frozenset({"movies", "tvshows"})


class UserNotFoundError(LookupError):
    """Raised when the caller of a library operation does not exist."""


class CollectionNotFoundError(ScanError):
    """Raised when a collection disappears while a scan is loading it."""


def _coerce_status(item: MediaItem, value: int | None) -> CoverageStatus | None:
    if value is None:
        return None
    try:
        return CoverageStatus(value)
    except ValueError as exc:
        raise ScanError(
            f"Item {item.id} has an invalid stored coverage value {value!r}"
        ) from exc


def _to_node(item: MediaItem) -> ContentNode:
    return ContentNode(
        id=item.id,
        kind=NodeKind(item.kind),
        name=item.name,
        parent_id=item.parent_id,
        dub_status=_coerce_status(item, item.dubbed_status),
        sub_status=_coerce_status(item, item.subbed_status),
    )


class LibraryRepository:
    """Reads library trees and writes coverage changes back."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_user(self, user_id: str) -> User:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def list_collections(self, *, include_hidden: bool = False) -> list[MediaItem]:
        async with self._session_factory() as session:
            stmt = select(MediaItem).where(
                MediaItem.kind == NodeKind.COLLECTION.value,
                MediaItem.parent_id.is_(None),
            )
            if not include_hidden:
                stmt = stmt.where(MediaItem.is_hidden.is_(False))
            stmt = stmt.order_by(MediaItem.sort_index, MediaItem.name)
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_user_views(
        self, user: User, *, include_hidden: bool = False
    ) -> list[UserView]:
        # Every user currently sees every collection; ``user`` is the seam
        # for per-user library access.
        collections = await self.list_collections(include_hidden=include_hidden)
        return [
            UserView(
                id=item.id,
                name=item.name,
                collection_type=item.collection_type,
                dubbed_status=item.dubbed_status,
                subbed_status=item.subbed_status,
            )
            for item in collections
        ]

    async def list_grouping_options(self, user: User) -> list[GroupingOption]:
        collections = await self.list_collections()
        options = [
            GroupingOption(name=item.name, id=item.id)
            for item in collections
            if item.collection_type in GROUPABLE_COLLECTION_TYPES
        ]
        return sorted(options, key=lambda option: option.name)

    async def load_collection_tree(self, collection: ContentNode) -> ContentNode:
        """Load a collection with its series, seasons, episodes and languages."""

        async with self._session_factory() as session:
            root = await session.get(MediaItem, collection.id)
            if root is None:
                raise CollectionNotFoundError(f"Collection {collection.id} not found")
            tree = _to_node(root)

            series_items = await self._children(session, [tree.id], NodeKind.SERIES)
            season_items = await self._children(
                session, [item.id for item in series_items], NodeKind.SEASON
            )
            episode_items = await self._children(
                session, [item.id for item in season_items], NodeKind.EPISODE
            )
            languages = await self._stream_languages(
                session, [item.id for item in episode_items]
            )

        nodes: dict[str, ContentNode] = {tree.id: tree}
        for item in (*series_items, *season_items, *episode_items):
            node = _to_node(item)
            if node.kind is NodeKind.EPISODE:
                audio, subtitles = languages.get(node.id, ((), ()))
                node.audio_languages = distinct_language_tags(audio)
                node.subtitle_languages = distinct_language_tags(subtitles)
            nodes[node.id] = node
            nodes[item.parent_id].add_child(node)  # type: ignore[index]
        return tree

    @staticmethod
    async def _children(
        session: AsyncSession, parent_ids: Sequence[str], kind: NodeKind
    ) -> list[MediaItem]:
        if not parent_ids:
            return []
        stmt = (
            select(MediaItem)
            .where(MediaItem.parent_id.in_(parent_ids), MediaItem.kind == kind.value)
            .order_by(MediaItem.parent_id, MediaItem.sort_index, MediaItem.name)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def _stream_languages(
        session: AsyncSession, item_ids: Sequence[str]
    ) -> dict[str, tuple[list[str], list[str]]]:
        if not item_ids:
            return {}
        stmt = select(
            MediaStream.item_id, MediaStream.stream_type, MediaStream.language
        ).where(
            MediaStream.item_id.in_(item_ids),
            MediaStream.stream_type.in_(("audio", "subtitle")),
        )
        result = await session.execute(stmt)
        languages: dict[str, tuple[list[str], list[str]]] = defaultdict(
            lambda: ([], [])
        )
        for item_id, stream_type, language in result.all():
            if not language:
                continue
            audio, subtitles = languages[item_id]
            (audio if stream_type == "audio" else subtitles).append(language)
        return dict(languages)

    async def apply_batch(
        self,
        nodes: Sequence[ContentNode],
        context: ContentNode,
        kind: UpdateKind,
    ) -> None:
        """Store the coverage of ``nodes`` in a single transaction."""

        if not nodes:
            return
        now = datetime.utcnow()
        async with self._session_factory() as session:
            async with session.begin():
                for node in nodes:
                    await session.execute(
                        update(MediaItem)
                        .where(MediaItem.id == node.id)
                        .values(
                            dubbed_status=_status_value(node.dub_status),
                            subbed_status=_status_value(node.sub_status),
                            updated_at=now,
                        )
                    )
        logger.debug(
            "Stored %d item(s) under %s (%s)", len(nodes), context.id, kind.value
        )


def _status_value(status: CoverageStatus | None) -> int | None:
    return int(status) if status is not None else None


class LibraryScanService:
    """Resolves the caller, then runs a scan over their visible collections."""

    def __init__(self, settings: Settings, repository: LibraryRepository):
        self._settings = settings
        self._repository = repository
        self._classifier = LeafClassifier(settings.target_language_config)
        self._lock = asyncio.Lock()

    async def scan(self, user_id: str) -> ScanSummary:
        user = await self._repository.get_user(user_id)
        if not user.is_administrator:
            raise PermissionError(f"User {user_id} may not start a library scan")

        async with self._lock:
            logger.info("Starting dub sub scan.")
            collections = [
                _to_node(item) for item in await self._repository.list_collections()
            ]
            logger.info("Found %d folders to scan", len(collections))

            scanner = DubSubScanner(
                self._classifier,
                self._repository,
                concurrency=self._settings.scan_concurrency,
                timeout_seconds=self._settings.scan_timeout_seconds,
                tree_loader=self._repository.load_collection_tree,
            )
            summary = await scanner.run(
                collections, self._settings.collection_filter()
            )
            logger.info("Dub sub scan complete.")
            logger.info("%s", summary.message())
            return summary

    async def list_user_views(
        self, user_id: str, *, include_hidden: bool = False
    ) -> list[UserView]:
        user = await self._repository.get_user(user_id)
        return await self._repository.list_user_views(
            user, include_hidden=include_hidden
        )

    async def list_grouping_options(self, user_id: str) -> list[GroupingOption]:
        user = await self._repository.get_user(user_id)
        return await self._repository.list_grouping_options(user)
