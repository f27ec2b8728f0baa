from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Optional

import google.auth
from google.cloud import dialogflow, texttospeech
from google.oauth2 import service_account
from googleapiclient.discovery import build

from config.settings import Settings


logger = logging.getLogger("chatbot.clients")

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _read_project_id(key_path: Path) -> Optional[str]:
    try:
        data = json.loads(key_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read project_id from %s: %s", key_path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Could not read project_id from %s: key file is not a JSON object", key_path)
        return None
    return data.get("project_id")


class GoogleClientFactory:
    """Builds the Dialogflow, Text-to-Speech and Sheets clients.

    The credential source is decided once, when the factory is created: a
    service-account key file is used when present and
    GOOGLE_APPLICATION_CREDENTIALS is not set, otherwise Application Default
    Credentials. Clients are created lazily on first use and then shared.
    """

    def __init__(self, key_path: Optional[Path] = None, project_id: Optional[str] = None) -> None:
        self.key_path = key_path
        self.project_id = project_id
        self._lock = threading.Lock()
        self._sessions: Any = None
        self._tts: Any = None
        self._sheets: Any = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleClientFactory":
        key_path = Path(settings.google_key_file)
        if not settings.google_application_credentials and key_path.is_file():
            logger.info("Using service account key file %s", key_path)
            return cls(key_path=key_path, project_id=_read_project_id(key_path))
        logger.info("Using application default credentials")
        return cls(key_path=None, project_id=settings.dialogflow_project_id)

    @property
    def uses_key_file(self) -> bool:
        return self.key_path is not None

    def sessions_client(self) -> Any:
        with self._lock:
            if self._sessions is None:
                if self.key_path is not None:
                    self._sessions = dialogflow.SessionsClient.from_service_account_file(
                        str(self.key_path)
                    )
                else:
                    self._sessions = dialogflow.SessionsClient()
            return self._sessions

    def tts_client(self) -> Any:
        with self._lock:
            if self._tts is None:
                if self.key_path is not None:
                    self._tts = texttospeech.TextToSpeechClient.from_service_account_file(
                        str(self.key_path)
                    )
                else:
                    self._tts = texttospeech.TextToSpeechClient()
            return self._tts

    def sheets_service(self) -> Any:
        with self._lock:
            if self._sheets is None:
                if self.key_path is not None:
                    credentials = service_account.Credentials.from_service_account_file(
                        str(self.key_path), scopes=SHEETS_SCOPES
                    )
                else:
                    credentials, _ = google.auth.default(scopes=SHEETS_SCOPES)
                self._sheets = build(
                    "sheets", "v4", credentials=credentials, cache_discovery=False
                )
            return self._sheets
