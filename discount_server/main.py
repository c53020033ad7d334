import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket

from .config import Settings, get_settings
from .logic import DiscountService
from .protocol import serve_connection
from .storage import CodeStore

log = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ---------------------------
# FastAPI App & Routes
# ---------------------------

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    store = CodeStore(settings.storage_path)
    service = DiscountService(store)

    app = FastAPI(title="Discount Code Service")
    app.state.settings = settings
    app.state.store = store
    app.state.service = service

    @app.get("/health")
    def health_check():
        return {"status": "ok", "codes": store.stats()}

    @app.get("/ws")
    def websocket_required():
        raise HTTPException(status_code=400, detail="WebSocket connection required")

    @app.websocket("/ws")
    async def discount_socket(websocket: WebSocket):
        await websocket.accept()
        await serve_connection(websocket, service)

    log.info("Discount service ready, storage at %s", settings.storage_path)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "discount_server.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,  # keep False to avoid Windows reload issues
    )


if __name__ == "__main__":
    run()
