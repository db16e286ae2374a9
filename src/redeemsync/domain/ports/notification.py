"""Port for announcing that an entity's public content changed."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from redeemsync.domain.model import TrackedEntity


@runtime_checkable
class ContentChangedNotifier(Protocol):
    async def content_changed(self, entity: TrackedEntity) -> None: ...
