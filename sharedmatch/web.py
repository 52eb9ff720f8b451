"""FastAPI surface: streams shared-match search results as NDJSON."""

import time
from typing import Callable, Optional, Tuple

import requests
from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse, StreamingResponse

from . import __version__
from .adapters.pubg_api import PubgApiClient
from .config import Settings, load_settings
from .errors import ConfigurationError, InputError
from .log import setup_logger
from .protocol import error_message, progress_message
from .ratelimit import RateGate
from .service import CorrelationService
from .streaming import QueueSink, start_producer

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def create_app(
    settings: Optional[Settings] = None,
    gate: Optional[RateGate] = None,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logger("sharedmatch", settings.log_level)
    gate = gate or RateGate(quota=settings.rate_limit, window=settings.rate_window)
    session = session or requests.Session()

    app = FastAPI(title="SharedMatch", version=__version__)
    app.state.gate = gate

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/search")
    def search(payload: Optional[dict] = Body(None)):
        try:
            api_key = settings.require_api_key()
        except ConfigurationError as exn:
            return JSONResponse(error_message(str(exn)), status_code=500)

        try:
            player_name, opponent_name = _player_names(payload or {})
        except InputError as exn:
            return JSONResponse(error_message(str(exn)), status_code=400)

        sink = QueueSink()
        client = PubgApiClient(
            api_key,
            gate=gate,
            shard=settings.shard,
            session=session,
            sleep=sleep,
            on_wait=lambda seconds: sink.emit(
                progress_message(f"Rate limit reached. Waiting {seconds:.0f}s...")
            ),
            should_stop=lambda: sink.closed,
        )
        service = CorrelationService(client, display_zone=settings.display_zone)
        start_producer(lambda: service.run(player_name, opponent_name, sink))

        return StreamingResponse(
            sink.iter_lines(),
            media_type=NDJSON_MEDIA_TYPE,
            headers={"Cache-Control": "no-cache"},
        )

    return app


def _player_names(payload: dict) -> Tuple[str, str]:
    player_name = str(payload.get("playerName") or "").strip()
    opponent_name = str(payload.get("opponentName") or "").strip()
    if not player_name or not opponent_name:
        raise InputError("Player names required")
    return player_name, opponent_name


app = create_app()
