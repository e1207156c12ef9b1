"""Client layer for ogrelay.

Classes:
    :class:`ExecutionEngine` -- cache check, transport call, expiry
    detection, single renewal retry; owns the cache and the session.
    :class:`GameClient` -- typed accessors over the endpoint catalog, plus
    relaying of translated browser requests.

Example::

    from ogrelay.client import GameClient

    async with GameClient.from_config(config, account) as client:
        page = await client.overview()
"""

from ogrelay.client.engine import ExecutionEngine, cache_key
from ogrelay.client.game_client import Extractor, GameClient

__all__ = ["ExecutionEngine", "Extractor", "GameClient", "cache_key"]
