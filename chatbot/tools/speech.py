from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

from google.cloud import texttospeech

from chatbot.core.errors import SynthesisError
from chatbot.core.models import AUDIO_MIME, VoiceConfig


logger = logging.getLogger("chatbot.speech")


class SpeechSynthesizer:
    def __init__(self, clients: Any, end_text: str, voice: Optional[VoiceConfig] = None) -> None:
        self._clients = clients
        self.end_text = end_text
        self.voice = voice or VoiceConfig()

    def synthesize(self, text: str) -> bytes:
        try:
            client = self._clients.tts_client()
            response = client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=self.voice.language_code,
                    name=self.voice.name,
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding.MP3,
                    speaking_rate=self.voice.speaking_rate,
                    pitch=self.voice.pitch,
                ),
            )
        except Exception as exc:
            raise SynthesisError(f"Text-to-Speech failed: {exc}") from exc

        audio = getattr(response, "audio_content", None)
        if not audio:
            raise SynthesisError("Text-to-Speech returned no audio")
        return audio

    def synthesize_end_audio(self) -> Dict[str, Optional[str]]:
        """Closing message with audio when available. Never raises."""
        try:
            audio = base64.b64encode(self.synthesize(self.end_text)).decode("ascii")
        except SynthesisError as exc:
            logger.warning("End audio synthesis failed, replying text only: %s", exc)
            audio = None
        return {"reply": self.end_text, "audio": audio, "mime": AUDIO_MIME}
