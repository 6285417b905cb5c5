"""The game world: online players and the area-of-interest grid they stand on."""

from __future__ import annotations

import threading
from typing import Any, Optional

from zinx.aoi import (
    AOI_CNTS_X,
    AOI_CNTS_Y,
    AOI_MAX_X,
    AOI_MAX_Y,
    AOI_MIN_X,
    AOI_MIN_Y,
    AOIManager,
)


class WorldManager:
    """Online players by id, placed on an :class:`AOIManager`.

    A player is any object with ``pid``, ``x`` and ``z`` attributes; ``x`` and
    ``z`` are its position on the map.
    """

    def __init__(self, aoi_mgr: Optional[AOIManager] = None):
        if aoi_mgr is None:
            aoi_mgr = AOIManager(AOI_MIN_X, AOI_MAX_X, AOI_CNTS_X,
                                 AOI_MIN_Y, AOI_MAX_Y, AOI_CNTS_Y)
        self.aoi_mgr = aoi_mgr
        self.players: dict[int, Any] = {}
        self._lock = threading.RLock()

    def add_player(self, player: Any) -> None:
        """Register ``player`` and put it in the grid cell at its position."""
        with self._lock:
            self.players[player.pid] = player
        self.aoi_mgr.add_to_grid_by_pos(player.pid, player.x, player.z)

    def remove_player_by_pid(self, pid: int) -> None:
        """Forget the player; its grid cell is left to the caller."""
        with self._lock:
            self.players.pop(pid, None)

    def get_player_by_pid(self, pid: int) -> Optional[Any]:
        with self._lock:
            return self.players.get(pid)

    def get_all_players(self) -> list[Any]:
        with self._lock:
            return list(self.players.values())

    def get_players_by_gid(self, gid: int) -> list[Optional[Any]]:
        """Players in cell ``gid``; ``None`` stands for an id no longer online."""
        pids = self.aoi_mgr.grids[gid].player_ids()
        with self._lock:
            return [self.players.get(pid) for pid in pids]