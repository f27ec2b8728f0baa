from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import dialogflow

from chatbot.core.errors import IntentBackendError
from chatbot.core.gate import ConversationGate
from chatbot.core.models import ExchangeRequest, ExchangeResult, VoiceConfig
from chatbot.core.session import SessionHandle, new_session


logger = logging.getLogger("chatbot.relay")


def build_detect_intent_request(
    session: SessionHandle, request: ExchangeRequest, voice: VoiceConfig
) -> Dict[str, Any]:
    query_input = dialogflow.QueryInput(
        text=dialogflow.TextInput(text=request.text, language_code=request.lang)
    )
    payload: Dict[str, Any] = {"session": session.path, "query_input": query_input}
    if request.is_voice:
        payload["output_audio_config"] = dialogflow.OutputAudioConfig(
            audio_encoding=dialogflow.OutputAudioEncoding.OUTPUT_AUDIO_ENCODING_MP3,
            synthesize_speech_config=dialogflow.SynthesizeSpeechConfig(
                voice=dialogflow.VoiceSelectionParams(name=voice.name),
                speaking_rate=voice.speaking_rate,
                pitch=voice.pitch,
            ),
        )
    return payload


def _fulfillment_text(response: Any) -> str:
    query_result = getattr(response, "query_result", None)
    text = getattr(query_result, "fulfillment_text", None) or ""
    return text.strip()


class IntentRelay:
    """Sends one utterance to Dialogflow per call, under a fresh session."""

    def __init__(
        self,
        clients: Any,
        gate: ConversationGate,
        end_text: str,
        voice: Optional[VoiceConfig] = None,
        project_id: Optional[str] = None,
    ) -> None:
        self._clients = clients
        self._gate = gate
        self.end_text = end_text
        self.voice = voice or VoiceConfig()
        self.project_id = project_id if project_id is not None else getattr(clients, "project_id", None)

    def detect_intent(self, request: ExchangeRequest) -> ExchangeResult:
        if not self.project_id:
            raise IntentBackendError(
                "Dialogflow project id not configured. Set DIALOGFLOW_PROJECT_ID or provide a key file"
            )

        session = new_session(self.project_id)
        payload = build_detect_intent_request(session, request, self.voice)

        try:
            client = self._clients.sessions_client()
            started = time.perf_counter()
            response = client.detect_intent(request=payload)
            rt_ms = max(0, int((time.perf_counter() - started) * 1000))
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise IntentBackendError(f"Dialogflow detect_intent failed: {exc}") from exc

        reply_text = _fulfillment_text(response)
        is_end = reply_text == self.end_text
        if is_end:
            self._gate.mark_ended()

        audio = getattr(response, "output_audio", None) if request.is_voice else None
        logger.info(
            "detect_intent ok: session=%s cond=%s rt_ms=%s reply_len=%s is_end=%s",
            session.session_token,
            request.cond,
            rt_ms,
            len(reply_text),
            is_end,
        )
        return ExchangeResult(
            reply_text=reply_text,
            rt_ms=rt_ms,
            session_path=session.path,
            is_end=is_end,
            audio=audio or None,
        )
