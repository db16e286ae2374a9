"""Ports for pulling codes and social links out of external source pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from redeemsync.domain.model import ExtractionResult, SocialLinkExtraction


@runtime_checkable
class CodeExtractor(Protocol):
    """Fetch every source URL of an entity and merge the codes found.

    Raises when any source fails; a partial result must never reach the
    reconciler since it would delete codes the failing source still lists.
    """

    async def extract(self, urls: Sequence[str]) -> ExtractionResult: ...


@runtime_checkable
class SocialLinkExtractor(Protocol):
    """Collect social links from source pages. Per-source failures are reported, not raised."""

    async def extract_social_links(self, urls: Sequence[str]) -> SocialLinkExtraction: ...
