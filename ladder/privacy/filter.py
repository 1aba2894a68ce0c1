"""
Privacy filter.

Decides whether a viewer may see a piece of someone else's content, given
the owner's visibility setting for that category of content:

    viewer is owner   -> visible
    everyone          -> visible
    none              -> hidden
    connections       -> visible iff viewer and owner are connected

Settings that are missing or unrecognised resolve to EVERYONE (see
Visibility.parse).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping

from ladder.connections.graph import ConnectionGraph
from ladder.core.models import PrivacyField, PrivacySettings, Visibility
from ladder.core.utils import normalize_id
from ladder.storage.base import SettingsStore

logger = logging.getLogger(__name__)

# Checked in order; the first one present names the content owner
OWNER_KEYS = ("author_id", "user_id", "owner_id")


def resolve_owner_id(item: Any) -> int | None:
    """Owner of a content item, from a mapping or an object."""
    for key in OWNER_KEYS:
        if isinstance(item, Mapping):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if value:
            return normalize_id(value)
    return None


class PrivacyFilter:
    """Apply owners' visibility settings to what a viewer gets back."""

    def __init__(self, graph: ConnectionGraph, settings: SettingsStore):
        self.graph = graph
        self.settings = settings

    async def can_see(
        self,
        viewer_id: int | None,
        owner_id: int,
        setting: Visibility | str | None,
    ) -> bool:
        """
        Whether `viewer_id` may see content owned by `owner_id`.

        An anonymous viewer (None) only sees content shared with everyone.
        """
        if viewer_id is not None and viewer_id == owner_id:
            return True

        visibility = Visibility.parse(setting)
        if visibility is Visibility.EVERYONE:
            return True
        if visibility is Visibility.NONE:
            return False
        if viewer_id is None:
            return False
        return await self.graph.is_connected(viewer_id, owner_id)

    async def get_privacy_settings(self, owner_id: int) -> PrivacySettings:
        return await self.settings.get_settings(owner_id)

    async def _is_visible(
        self,
        item: Any,
        viewer_id: int | None,
        field: PrivacyField | str,
    ) -> bool:
        owner_id = resolve_owner_id(item)
        if owner_id is None:
            return True
        setting = await self.settings.get_visibility(owner_id, field)
        return await self.can_see(viewer_id, owner_id, setting)

    async def filter_by_privacy(
        self,
        items: Iterable[Any],
        viewer_id: int | None,
        field: PrivacyField | str,
    ) -> list[Any]:
        """
        Keep the items `viewer_id` may see, in input order.

        Items without a resolvable owner pass through. Lookups for all
        items run concurrently.
        """
        items = list(items)
        if not items:
            return []

        visible = await asyncio.gather(
            *(self._is_visible(item, viewer_id, field) for item in items)
        )
        kept = [item for item, ok in zip(items, visible) if ok]

        field_label = field.value if isinstance(field, PrivacyField) else field
        if len(kept) != len(items):
            logger.debug(
                f"Privacy filter on {field_label} hid {len(items) - len(kept)} "
                f"of {len(items)} items from viewer {viewer_id}"
            )
        return kept
