from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal, Dict, List
import asyncio, logging, websockets, time

log = logging.getLogger(__name__)

Slot = Literal["ring","necklace","left_earring","right_earring"]

class OverlayTransform(BaseModel):
    """Pixel-space placement of one jewelry element. Hidden, not removed, when tracking is lost."""
    x: float=0.0; y: float=0.0; scale: float=1.0; rotation: float=0.0; visible: bool=False

class OverlayEvent(BaseModel):
    ts: float = Field(default_factory=lambda: time.time())
    product_id: str
    slot: Slot
    transform: OverlayTransform

def events_for(product_id: str, overlays: Dict[str, OverlayTransform]) -> List[OverlayEvent]:
    return [OverlayEvent(product_id=product_id, slot=slot, transform=t) for slot, t in overlays.items()]

async def ws_broadcast(queue: "asyncio.Queue[str]", host="0.0.0.0", port=8765):
    clients=set()
    async def handler(websocket):
        clients.add(websocket)
        try:
            await websocket.wait_closed()
        finally:
            clients.discard(websocket)
    async def fanout():
        while True:
            msg = await queue.get()
            if clients:
                results = await asyncio.gather(*[c.send(msg) for c in list(clients)], return_exceptions=True)
                for r in results:
                    if isinstance(r, Exception): log.debug("dropping client: %s", r)
    async with websockets.serve(handler, host, port):
        log.info("broadcasting overlays on ws://%s:%d", host, port)
        await fanout()
