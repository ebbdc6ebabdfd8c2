"""Load, reconstruct and draw a collection's history."""

from __future__ import annotations

import logging

from .codec import LinkCodec
from .emit import GraphSurface, replay
from .ops import Operation
from .ordering import OrderFn
from .reconstruct import reconstruct
from .stores.base import VersionStore

logger = logging.getLogger(__name__)


def render_history(
    store: VersionStore,
    collection: str,
    surface: GraphSurface,
    *,
    codec: LinkCodec | None = None,
    order: OrderFn | None = None,
) -> list[Operation]:
    """Draw the history of ``collection`` onto ``surface``.

    Nothing reaches the surface if the log is rejected.

    Returns:
        The operations that were replayed.
    """
    versions = store.list_versions(collection)
    logger.debug("Loaded %d versions for %s", len(versions), collection)
    ops = reconstruct(versions, codec=codec, order=order)
    replay(ops, surface)
    return ops
