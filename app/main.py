from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import APIRouter, BackgroundTasks, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
import logging

from chatbot.clients import GoogleClientFactory
from chatbot.core.errors import IntentBackendError
from chatbot.core.gate import ConversationGate
from chatbot.core.models import AUDIO_MIME, ExchangeRequest, LogRecord, VoiceConfig
from chatbot.relay import IntentRelay
from chatbot.tools import ExchangeLogger, SpeechSynthesizer
from chatbot.tools.sheets_log import utc_timestamp
from config.settings import Settings, get_settings


logging.basicConfig(
    level=get_settings().log_level,
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("chatbot")

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
def health() -> str:
    return "ok"


@router.get("/end-audio")
def end_audio(request: Request) -> Dict[str, Any]:
    speech: SpeechSynthesizer = request.app.state.speech
    return speech.synthesize_end_audio()


@router.post("/query")
def query(req: ExchangeRequest, request: Request, background_tasks: BackgroundTasks) -> Any:
    state = request.app.state
    gate: ConversationGate = state.gate
    if gate.is_ended():
        return {"reply": state.settings.ended_reply, "audio": None, "mime": AUDIO_MIME}

    logger.info(
        "Incoming query: pid=%s cond=%s lang=%s turn=%s text_len=%s",
        req.pid,
        req.cond,
        req.lang,
        req.turn,
        len(req.text),
    )
    relay: IntentRelay = state.relay
    try:
        result = relay.detect_intent(req)
    except IntentBackendError:
        logger.exception("query error: pid=%s", req.pid)
        return JSONResponse(status_code=500, content={"error": "dialogflow error"})

    # Log write runs after the response is prepared; its outcome is ignored.
    record = LogRecord.from_exchange(req, result, timestamp=utc_timestamp())
    exchange_log: ExchangeLogger = state.exchange_log
    background_tasks.add_task(exchange_log.append, record)

    if req.is_voice:
        return {
            "reply": result.reply_text,
            "audio": result.audio_base64,
            "mime": result.mime,
            "rt_ms": result.rt_ms,
        }
    return {"reply": result.reply_text, "rt_ms": result.rt_ms}


def _install_cors(app: FastAPI, allowed_origins: List[str]) -> None:
    """Allow-list CORS. No Origin header, or an empty allow-list, passes."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if not allowed_origins:
        return

    allowed = set(allowed_origins)

    @app.middleware("http")
    async def reject_unknown_origin(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin not in allowed:
            logger.warning("CORS rejected origin=%s path=%s", origin, request.url.path)
            return JSONResponse(status_code=403, content={"error": "origin not allowed"})
        return await call_next(request)


def create_app(
    settings: Optional[Settings] = None,
    clients: Any = None,
    gate: Optional[ConversationGate] = None,
    relay: Optional[IntentRelay] = None,
    exchange_log: Optional[ExchangeLogger] = None,
    speech: Optional[SpeechSynthesizer] = None,
) -> FastAPI:
    settings = settings or get_settings()
    clients = clients or GoogleClientFactory.from_settings(settings)
    gate = gate or ConversationGate()
    voice = VoiceConfig(
        name=settings.tts_voice_name,
        language_code=settings.tts_language_code,
        speaking_rate=settings.tts_speaking_rate,
        pitch=settings.tts_pitch,
    )

    app = FastAPI(title="Dialogflow Chat Relay", version="1.0.0")
    app.state.settings = settings
    app.state.gate = gate
    app.state.relay = relay or IntentRelay(clients, gate, end_text=settings.end_text, voice=voice)
    app.state.exchange_log = exchange_log or ExchangeLogger(
        clients, settings.sheets_id, settings.sheets_tab
    )
    app.state.speech = speech or SpeechSynthesizer(clients, end_text=settings.end_text, voice=voice)

    _install_cors(app, settings.allowed_origins)
    app.include_router(router)

    public_dir = Path(settings.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")
    else:
        logger.info("Static directory %s not found; static serving disabled", public_dir)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logger.info("Chatbot server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
