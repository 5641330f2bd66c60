"""In-memory content trees loaded for a single scan pass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Protocol, Sequence

from .coverage import CoverageStatus


class NodeKind(str, Enum):
    COLLECTION = "collection"
    SERIES = "series"
    SEASON = "season"
    EPISODE = "episode"


class UpdateKind(str, Enum):
    """Reason attached to a persisted batch."""

    METADATA_EDIT = "metadata_edit"


StatusPair = tuple[CoverageStatus | None, CoverageStatus | None]


@dataclass(eq=False)
class ContentNode:
    """A library item addressed by identifier.

    ``dub_status``/``sub_status`` of ``None`` means the item has never been
    assigned a value. Stream languages are only populated on episodes.
    """

    id: str
    kind: NodeKind
    name: str = ""
    parent_id: str | None = None
    children: list["ContentNode"] = field(default_factory=list)
    dub_status: CoverageStatus | None = None
    sub_status: CoverageStatus | None = None
    audio_languages: frozenset[str] = frozenset()
    subtitle_languages: frozenset[str] = frozenset()

    @property
    def status(self) -> StatusPair:
        return self.dub_status, self.sub_status

    def add_child(self, child: "ContentNode") -> "ContentNode":
        child.parent_id = self.id
        self.children.append(child)
        return child

    def _children_of(self, kind: NodeKind) -> list["ContentNode"]:
        return [child for child in self.children if child.kind is kind]

    def series(self) -> list["ContentNode"]:
        return self._children_of(NodeKind.SERIES)

    def seasons(self) -> list["ContentNode"]:
        return self._children_of(NodeKind.SEASON)

    def episodes(self) -> list["ContentNode"]:
        return self._children_of(NodeKind.EPISODE)

    def walk(self) -> Iterator["ContentNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class StatusSnapshot:
    """Statuses as they were stored before the current scan touched them."""

    statuses: dict[str, StatusPair] = field(default_factory=dict)

    @classmethod
    def capture(cls, roots: Iterable[ContentNode]) -> "StatusSnapshot":
        snapshot = cls()
        for root in roots:
            for node in root.walk():
                snapshot.statuses[node.id] = node.status
        return snapshot

    def previous(self, node: ContentNode) -> StatusPair:
        return self.statuses.get(node.id, (None, None))

    def changed(self, node: ContentNode) -> bool:
        return self.previous(node) != node.status


class BatchSink(Protocol):
    """Persists a group of changed sibling nodes under one parent."""

    async def apply_batch(
        self,
        nodes: Sequence[ContentNode],
        context: ContentNode,
        kind: UpdateKind,
    ) -> None:  # pragma: no cover - protocol
        ...
