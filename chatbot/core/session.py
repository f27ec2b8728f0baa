from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SessionHandle:
    """Disposable Dialogflow session scoping one exchange."""

    project_id: str
    session_token: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def path(self) -> str:
        return f"projects/{self.project_id}/agent/sessions/{self.session_token}"


def new_session(project_id: str, token: Optional[str] = None) -> SessionHandle:
    if token is None:
        return SessionHandle(project_id=project_id)
    return SessionHandle(project_id=project_id, session_token=token)
