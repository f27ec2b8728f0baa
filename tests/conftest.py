from __future__ import annotations

import time
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from config.settings import Settings


END_TEXT = "대화 시간이 끝났어요."


class FakeSessionsClient:
    def __init__(
        self,
        reply: str = "Hello",
        audio: bytes = b"",
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ) -> None:
        self.reply = reply
        self.audio = audio
        self.delay = delay
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def detect_intent(self, request: Dict[str, Any]) -> Any:
        self.calls.append(request)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            query_result=SimpleNamespace(fulfillment_text=self.reply),
            output_audio=self.audio,
        )


class FakeTTSClient:
    def __init__(self, audio: bytes = b"mp3-bytes", error: Optional[Exception] = None) -> None:
        self.audio = audio
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def synthesize_speech(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(audio_content=self.audio)


class _Execute:
    def __init__(self, sheets: "FakeSheetsService") -> None:
        self._sheets = sheets

    def execute(self) -> Dict[str, Any]:
        if self._sheets.error is not None:
            raise self._sheets.error
        self._sheets.rows.append(self._sheets.calls[-1]["body"]["values"][0])
        return {"updates": {"updatedRows": 1}}


class FakeSheetsService:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.rows: List[List[Any]] = []

    def spreadsheets(self) -> "FakeSheetsService":
        return self

    def values(self) -> "FakeSheetsService":
        return self

    def append(self, **kwargs: Any) -> _Execute:
        self.calls.append(kwargs)
        return _Execute(self)


class FakeClients:
    def __init__(
        self,
        sessions: Optional[FakeSessionsClient] = None,
        tts: Optional[FakeTTSClient] = None,
        sheets: Optional[FakeSheetsService] = None,
        project_id: Optional[str] = "test-project",
    ) -> None:
        self.sessions = sessions or FakeSessionsClient()
        self.tts = tts or FakeTTSClient()
        self.sheets = sheets or FakeSheetsService()
        self.project_id = project_id

    def sessions_client(self) -> FakeSessionsClient:
        return self.sessions

    def tts_client(self) -> FakeTTSClient:
        return self.tts

    def sheets_service(self) -> FakeSheetsService:
        return self.sheets


@pytest.fixture
def settings(tmp_path) -> Settings:
    s = Settings()
    s.allowed_origins = []
    s.public_dir = str(tmp_path / "no-public")
    s.end_text = END_TEXT
    s.ended_reply = "(conversation ended)"
    s.sheets_id = "sheet-123"
    s.sheets_tab = "chatlog"
    s.tts_voice_name = "ko-KR-Chirp3-HD-Leda"
    s.tts_language_code = "ko-KR"
    s.tts_speaking_rate = 1.0
    s.tts_pitch = 0.0
    return s


@pytest.fixture
def clients() -> FakeClients:
    return FakeClients()
