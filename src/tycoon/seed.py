"""Seed data for the global, read-only documents: quests, syndicates, darkweb items."""

from __future__ import annotations

import logging

from tycoon.context import GameContext
from tycoon.darkweb.service import DEFAULT_ITEMS
from tycoon.quests.service import DEFAULT_QUESTS
from tycoon.store import keys
from tycoon.store.base import MUST_NOT_EXIST, Write
from tycoon.syndicates.service import DEFAULT_SYNDICATES

logger = logging.getLogger(__name__)


async def seed_game_data(ctx: GameContext) -> int:
    """Create any missing seed documents. Existing ones are left untouched.

    Returns the number of documents created.
    """
    candidates = [
        *((keys.quest(q.id), q) for q in DEFAULT_QUESTS),
        *((keys.syndicate(s.id), s) for s in DEFAULT_SYNDICATES),
        *((keys.darkweb_item(i.id), i) for i in DEFAULT_ITEMS),
    ]
    writes = []
    for key, model in candidates:
        if await ctx.store.get(key) is None:
            writes.append(Write(key, model.model_dump(mode="json"), MUST_NOT_EXIST))
    if writes:
        await ctx.store.commit(writes)
    logger.info("Seeded %d game documents", len(writes))
    return len(writes)
