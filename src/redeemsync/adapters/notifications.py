"""Notify the website that an entity's public page should be rebuilt."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redeemsync.adapters.http_resilience import ResilientClient
    from redeemsync.config import RevalidationConfig
    from redeemsync.domain.model import TrackedEntity
    from redeemsync.domain.ports import ContentChangedNotifier

log = getLogger(__name__)

_BODY_PREVIEW_LENGTH = 200


class RevalidationNotifier:
    """POST ``{"type": "code", "slug": ...}`` to the revalidation endpoint.

    Failures are reported as warnings; a missed revalidation only delays the
    page update until the next one.
    """

    def __init__(self, config: RevalidationConfig, client: ResilientClient) -> None:
        self._config = config
        self._client = client

    async def content_changed(self, entity: TrackedEntity) -> None:
        slug = entity.slug.strip().lower()
        if not slug:
            return
        response = await self._client.post(
            self._config.endpoint,
            json={"type": "code", "slug": slug},
            headers={"Authorization": f"Bearer {self._config.secret}"},
        )
        if response.is_success:
            log.debug("Revalidated %s", slug)
            return
        log.warning(
            "Revalidate failed for %s: %s %s",
            slug,
            response.status_code,
            response.text[:_BODY_PREVIEW_LENGTH],
        )


class NullNotifier:
    async def content_changed(self, entity: TrackedEntity) -> None:
        _ = entity


if TYPE_CHECKING:
    _null_check: ContentChangedNotifier = NullNotifier()
