from __future__ import annotations
import typer, asyncio, cv2
from rich import print
from rich.console import Console
from rich.table import Table
from typing import Dict, Optional

from .app import TryOnView
from .catalog import Product, load_catalog, lookup
from .config import TryOnConfig, load_config
from .io.camera import CameraSource
from .log import setup_logging
from .runtime.events import OverlayTransform, events_for, ws_broadcast
from .tracking.detector import face_detector, hand_detector

app = typer.Typer(add_completion=False, help="TryOnKit CLI (tryon)")

MARKER = {"ring": (0,215,255), "necklace": (255,200,0), "left_earring": (0,255,0), "right_earring": (0,255,0)}

def _settings(config: Optional[str], camera: Optional[int], width: Optional[int], height: Optional[int]) -> TryOnConfig:
    cfg = load_config(config)
    overrides = {k: v for k, v in (("index", camera), ("width", width), ("height", height)) if v is not None}
    if overrides:
        cfg = cfg.model_copy(update={"camera": cfg.camera.model_copy(update=overrides)})
    setup_logging(cfg.log_level)
    return cfg

def _product(product_id: str, catalog: Optional[str]) -> Product:
    product = lookup(product_id, load_catalog(catalog))
    if product is None:
        print(f"[red]Unknown product[/red] {product_id}")
        raise typer.Exit(code=1)
    return product

def _view(cfg: TryOnConfig, product: Product) -> TryOnView:
    source = CameraSource(cfg.camera.index, cfg.camera.width, cfg.camera.height)
    return TryOnView(product, source, lambda: hand_detector(cfg.hands), lambda: face_detector(cfg.face))

def emit_events(product_id: str, overlays: Dict[str, OverlayTransform], queue: Optional["asyncio.Queue[str]"] = None):
    # plain stdout: rich would wrap long lines and eat [...] as markup
    for ev in events_for(product_id, overlays):
        line = ev.model_dump_json()
        typer.echo(line)
        if queue is not None: queue.put_nowait(line)

async def _start_with_retry(view: TryOnView) -> bool:
    await view.start()
    while view.camera_error or view.tracking_error:
        print(f"[red]{view.camera_error or view.tracking_error}[/red]")
        if not typer.confirm("Try again?", default=True):
            return False
        await view.retry()
    return True

@app.command()
def products(type: Optional[str] = typer.Option(None, help="ring, necklace or earring"), catalog: Optional[str] = None):
    """
    List the catalog.
    """
    table = Table("id", "name", "type", "base_scale", "offset", "price")
    for p in load_catalog(catalog):
        if type and p.type != type: continue
        table.add_row(p.id, p.name, p.type, f"{p.base_scale:g}", f"({p.offset_x:g}, {p.offset_y:g})", p.price or "")
    Console().print(table)

@app.command()
def run(product_id: str, config: Optional[str] = typer.Option(None), catalog: Optional[str] = None,
        ws: bool = typer.Option(False, help="broadcast overlays over WebSocket"),
        camera: Optional[int] = None, width: Optional[int] = None, height: Optional[int] = None):
    """
    Track the product's landmarks and print overlay transforms as JSONL; optionally broadcast over WebSocket.
    """
    cfg = _settings(config, camera, width, height)
    product = _product(product_id, catalog)
    queue: "asyncio.Queue[str]" = asyncio.Queue()

    async def main():
        view = _view(cfg, product)
        view.subscribe(lambda p, overlays: emit_events(p.id, overlays, queue if ws else None))
        bcast = None
        try:
            if not await _start_with_retry(view): return
            if ws:
                bcast = asyncio.create_task(ws_broadcast(queue, cfg.render.ws_host, cfg.render.ws_port))
            # runs until the camera stops or ctrl-c
            while view.camera_error is None:
                await asyncio.sleep(0.25)
            print(f"[red]{view.camera_error}[/red]")
        finally:
            if bcast is not None: bcast.cancel()
            await view.close()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

@app.command()
def preview(product_id: str, config: Optional[str] = typer.Option(None), catalog: Optional[str] = None,
            camera: Optional[int] = None, width: Optional[int] = None, height: Optional[int] = None):
    """
    Mirrored camera preview with a debug marker per visible overlay; press q to quit.
    """
    cfg = _settings(config, camera, width, height)
    product = _product(product_id, catalog)

    async def main():
        view = _view(cfg, product)
        try:
            if not await _start_with_retry(view): return
            async for frame in view.source.frames():
                dbg = cv2.flip(frame["image"], 1)
                for slot, t in view.overlays.items():
                    if not t.visible: continue
                    c = (int(t.x), int(t.y))
                    cv2.circle(dbg, c, max(2, int(t.scale/2)), MARKER[slot], 2)
                    cv2.putText(dbg, f"{slot} {t.rotation:.0f}deg", (c[0]+8, c[1]-8), cv2.FONT_HERSHEY_SIMPLEX, 0.5, MARKER[slot], 1)
                hint = view.detection_hint or view.status_text
                cv2.putText(dbg, hint, (16, 32), cv2.FONT_HERSHEY_SIMPLEX, 0.8, (255,255,255), 2)
                cv2.imshow("TryOnKit", dbg)
                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break
        finally:
            cv2.destroyAllWindows()
            await view.close()

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass

if __name__ == "__main__":
    app()
