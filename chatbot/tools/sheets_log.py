"""Best-effort exchange log backed by a Google Sheets tab.

Appends are an isolation boundary: nothing raised while writing a row may
reach the HTTP response. Failed rows are logged and dropped, never retried.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from chatbot.core.errors import LogAppendError
from chatbot.core.models import LogRecord


logger = logging.getLogger("chatbot.sheets_log")

SHEET_COLUMNS = "A:J"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ExchangeLogger:
    def __init__(self, clients: Any, spreadsheet_id: Optional[str], sheet_name: str = "chatlog") -> None:
        self._clients = clients
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name

    @property
    def range(self) -> str:
        return f"{self.sheet_name}!{SHEET_COLUMNS}"

    def _write_row(self, record: LogRecord) -> None:
        try:
            service = self._clients.sheets_service()
            service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self.range,
                valueInputOption="RAW",
                body={"values": [record.to_row()]},
            ).execute()
        except Exception as exc:
            raise LogAppendError(str(exc)) from exc

    def append(self, record: LogRecord) -> bool:
        """Append one row. Returns False instead of raising on any failure."""
        if not self.spreadsheet_id:
            logger.warning("SHEETS_ID not configured; skipping log append for pid=%s", record.participant_id)
            return False
        try:
            self._write_row(record)
        except LogAppendError as exc:
            logger.error("Sheets append error: %s", exc)
            return False
        return True
