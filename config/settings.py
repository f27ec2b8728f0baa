from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


DEFAULT_END_TEXT = (
    "대화 시간이 끝났어요. 설문으로 돌아가 아래 본인확인코드를 입력하고 "
    "이어서 설문에 답변해 주세요. 감사합니다!"
)


def _split_origins(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Runtime options for the relay, read from the environment (and `.env`).

    Covers the listen address, CORS allow-list, the TTS voice, the closing
    message that ends the conversation, the Sheets log target and where
    Google credentials come from.
    """

    def __init__(self) -> None:
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "3000"))
        self.allowed_origins: List[str] = _split_origins(os.getenv("ALLOWED_ORIGINS", ""))
        self.public_dir: str = os.getenv("PUBLIC_DIR", "public")

        self.tts_voice_name: str = os.getenv("TTS_VOICE_NAME", "ko-KR-Chirp3-HD-Leda")
        self.tts_language_code: str = os.getenv("TTS_LANGUAGE_CODE", "ko-KR")
        self.tts_speaking_rate: float = float(os.getenv("TTS_SPEAKING_RATE", "1.0"))
        self.tts_pitch: float = float(os.getenv("TTS_PITCH", "0.0"))

        self.end_text: str = os.getenv("END_TEXT", DEFAULT_END_TEXT)
        self.ended_reply: str = os.getenv("ENDED_REPLY", "(conversation ended)")

        self.sheets_id: Optional[str] = os.getenv("SHEETS_ID") or None
        self.sheets_tab: str = os.getenv("SHEETS_TAB", "chatlog")

        self.google_application_credentials: Optional[str] = (
            os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None
        )
        self.google_key_file: str = os.getenv("GOOGLE_KEY_FILE", "voice-key.json")
        self.dialogflow_project_id: Optional[str] = os.getenv("DIALOGFLOW_PROJECT_ID") or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
