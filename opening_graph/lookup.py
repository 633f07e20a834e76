"""Opening name/ECO lookup by canonical position key."""

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from opening_graph.config import get_openings_source
from opening_graph.eco_ingest import load_opening_table
from opening_graph.errors import LookupNotLoaded
from opening_graph.models import OpeningIdentity

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[dict[str, OpeningIdentity]]]

# Used when the opening database cannot be loaded
BUILTIN_OPENINGS = {
    "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq -":
        OpeningIdentity(name="King's Pawn", eco="B00", moves="1. e4"),
    "rnbqkbnr/pppppppp/8/8/3P4/8/PPP1PPPP/RNBQKBNR b KQkq -":
        OpeningIdentity(name="Queen's Pawn", eco="D00", moves="1. d4"),
    "rnbqkbnr/pppppppp/8/8/8/5N2/PPPPPPPP/RNBQKB1R b KQkq -":
        OpeningIdentity(name="Uncommon Opening", eco="A00", moves="1. Nf3"),
    "rnbqkbnr/pppp1ppp/4p3/8/4P3/8/PPPP1PPP/RNBQKBNR w KQkq -":
        OpeningIdentity(name="French Defense", eco="C00", moves="1. e4 e6"),
    "rnbqkbnr/pp1ppppp/2p5/8/4P3/8/PPPP1PPP/RNBQKBNR w KQkq -":
        OpeningIdentity(name="Caro-Kann Defense", eco="B10", moves="1. e4 c6"),
}

FIRST_MOVE_NAMES = {
    "e4": "King's Pawn Game",
    "d4": "Queen's Pawn Game",
    "Nf3": "Réti Opening",
    "c4": "English Opening",
    "f4": "Bird's Opening",
    "Nc3": "Van't Kruijs Opening",
    "g3": "Benko's Opening",
    "b3": "Nimzowitsch-Larsen Attack",
}


def first_move_opening(san: str) -> OpeningIdentity:
    """Well-known name for a game's first move, without an ECO code."""
    return OpeningIdentity(name=FIRST_MOVE_NAMES.get(san, "Uncommon Opening"), eco="")


async def _load_configured_source() -> dict[str, OpeningIdentity]:
    return await load_opening_table(get_openings_source())


class OpeningLookup:
    """
    Shared opening table with a once-only asynchronous load.

    Concurrent first callers of ensure_loaded() await the same load. After
    it completes, resolve() is synchronous and memoizes every key it sees.
    """

    def __init__(self, loader: Loader | None = None):
        self._loader = loader or _load_configured_source
        self._table: dict[str, OpeningIdentity] | None = None
        self._loading: asyncio.Future | None = None
        self._cache: dict[str, OpeningIdentity | None] = {}

    @classmethod
    def from_table(cls, table: dict[str, OpeningIdentity]) -> "OpeningLookup":
        """A lookup that is already loaded with the given table."""
        lookup = cls()
        lookup._table = dict(table)
        return lookup

    @classmethod
    def builtin(cls) -> "OpeningLookup":
        return cls.from_table(BUILTIN_OPENINGS)

    @property
    def loaded(self) -> bool:
        return self._table is not None

    def __len__(self) -> int:
        return len(self._table or {})

    async def ensure_loaded(self) -> None:
        if self._table is not None:
            return
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        try:
            await self._loading
        finally:
            # a failed load is retried by the next caller, possibly on another loop
            if self._table is None:
                self._loading = None

    async def _load(self) -> None:
        try:
            table = await self._loader()
        except (OSError, httpx.HTTPError, ValueError, KeyError) as e:
            logger.warning("Could not load opening database, using built-in openings: %s", e)
            table = dict(BUILTIN_OPENINGS)
        self._table = table
        self._cache.clear()
        logger.info("Opening database ready: %d positions", len(table))

    def resolve(self, key: str) -> OpeningIdentity | None:
        """Exact match for a canonical key, or None."""
        if self._table is None:
            raise LookupNotLoaded("await ensure_loaded() before resolving openings")
        try:
            return self._cache[key]
        except KeyError:
            identity = self._cache[key] = self._table.get(key)
            return identity
