from chatbot.tools.sheets_log import ExchangeLogger
from chatbot.tools.speech import SpeechSynthesizer

__all__ = ["ExchangeLogger", "SpeechSynthesizer"]
