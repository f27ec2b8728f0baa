from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


AUDIO_MIME = "audio/mpeg"
VOICE_CONDITION = "voice"
AUDIO_MARKER = "hasAudio"


class ExchangeRequest(BaseModel):
    text: str = Field(..., description="User utterance")
    lang: str = Field("ko", description="IETF language tag forwarded to Dialogflow")
    cond: str = Field("text", description="'text' or 'voice'; anything else behaves as 'text'")
    pid: str = Field("anon", description="Participant identifier")
    turn: Optional[int] = Field(None, description="Conversation turn index")

    @field_validator("cond", mode="before")
    @classmethod
    def _coerce_cond(cls, value: Any) -> str:
        if value is None:
            return "text"
        return value if isinstance(value, str) else str(value)

    @property
    def is_voice(self) -> bool:
        return self.cond == VOICE_CONDITION


class VoiceConfig(BaseModel):
    """Voice used both for Dialogflow audio output and the closing audio."""

    name: str = "ko-KR-Chirp3-HD-Leda"
    language_code: str = "ko-KR"
    speaking_rate: float = 1.0
    pitch: float = 0.0


@dataclass(frozen=True)
class ExchangeResult:
    reply_text: str
    rt_ms: int
    session_path: str
    is_end: bool = False
    audio: Optional[bytes] = None
    mime: str = AUDIO_MIME

    @property
    def audio_base64(self) -> Optional[str]:
        if not self.audio:
            return None
        return base64.b64encode(self.audio).decode("ascii")


@dataclass(frozen=True)
class LogRecord:
    timestamp: str
    participant_id: str
    condition: str
    rt_ms: int
    turn: Optional[int]
    is_end: bool
    session_id: str
    input_text: str
    reply_text: str
    audio_marker: str = ""

    @classmethod
    def from_exchange(
        cls, request: ExchangeRequest, result: ExchangeResult, timestamp: str
    ) -> "LogRecord":
        return cls(
            timestamp=timestamp,
            participant_id=request.pid,
            condition=request.cond,
            rt_ms=result.rt_ms,
            turn=request.turn,
            is_end=result.is_end,
            session_id=result.session_path,
            input_text=request.text,
            reply_text=result.reply_text,
            audio_marker=AUDIO_MARKER if request.is_voice else "",
        )

    def to_row(self) -> List[Any]:
        # Column order of the sheet: A..J
        return [
            self.timestamp,
            self.participant_id,
            self.condition,
            self.rt_ms,
            "" if self.turn is None else self.turn,
            self.is_end,
            self.session_id,
            self.input_text,
            self.reply_text,
            self.audio_marker,
        ]
