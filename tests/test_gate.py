from __future__ import annotations

import threading

from chatbot.core.gate import ConversationGate


def test_gate_starts_active() -> None:
    assert ConversationGate().is_ended() is False


def test_mark_ended_is_terminal_and_idempotent() -> None:
    gate = ConversationGate()
    gate.mark_ended()
    gate.mark_ended()
    assert gate.is_ended() is True


def test_concurrent_mark_ended() -> None:
    gate = ConversationGate()
    threads = [threading.Thread(target=gate.mark_ended) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert gate.is_ended() is True
