from collections import defaultdict
from typing import Any, Dict, Set

from fastapi import WebSocket

from artisan_market.utils.logging import get_logger

logger = get_logger(__name__)


class AuctionHub:
    """Auction rooms for the websocket layer, keyed by auction id."""

    def __init__(self):
        self.rooms: Dict[int, Set[WebSocket]] = defaultdict(set)

    def join(self, auction_id: int, websocket: WebSocket):
        self.rooms[auction_id].add(websocket)
        logger.info(f"Socket joined auction room {auction_id} ({len(self.rooms[auction_id])} members)")

    def leave_all(self, websocket: WebSocket):
        for auction_id in list(self.rooms):
            self.rooms[auction_id].discard(websocket)
            if not self.rooms[auction_id]:
                del self.rooms[auction_id]

    async def send(self, websocket: WebSocket, event: str, data: Any):
        await websocket.send_json({"event": event, "data": data})

    async def broadcast(self, auction_id: int, event: str, data: Any):
        stale = []
        for websocket in list(self.rooms.get(auction_id, ())):
            try:
                await self.send(websocket, event, data)
            except RuntimeError as e:
                # socket closed between join and broadcast
                logger.warning(f"Dropping socket from auction room {auction_id}: {e}")
                stale.append(websocket)
        for websocket in stale:
            self.rooms[auction_id].discard(websocket)


hub = AuctionHub()
