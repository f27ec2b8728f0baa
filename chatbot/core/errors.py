from __future__ import annotations


class ChatbotError(Exception):
    """Base class for errors raised by the chatbot core."""


class IntentBackendError(ChatbotError):
    """The intent-detection backend could not produce a reply."""


class SynthesisError(ChatbotError):
    """Speech synthesis failed."""


class LogAppendError(ChatbotError):
    """A row could not be appended to the exchange log."""
