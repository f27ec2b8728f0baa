"""Process-wide end-of-conversation gate.

The gate is deliberately global: once any exchange receives the closing
message, every participant's later queries are answered with the ended reply.
There is no per-session scope and no reset short of restarting the process.
"""

from __future__ import annotations

import logging
import threading


logger = logging.getLogger("chatbot.gate")


class ConversationGate:
    def __init__(self) -> None:
        self._ended = threading.Event()

    def is_ended(self) -> bool:
        return self._ended.is_set()

    def mark_ended(self) -> None:
        if not self._ended.is_set():
            logger.info("Conversation gate closed: further queries get the ended reply")
        self._ended.set()
