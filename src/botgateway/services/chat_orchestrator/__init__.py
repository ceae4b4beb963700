"""
Chat orchestration: authorize, resolve, generate, persist and respond.
"""

from .models import BotReply, ChatRequest, ChatResult
from .orchestrator import FALLBACK_TEXT, ChatOrchestrator, PreparedRequest
from .sinks import BufferedSink, EventStreamSink, ResponseSink

__all__ = [
    'BotReply',
    'ChatRequest',
    'ChatResult',
    'ChatOrchestrator',
    'PreparedRequest',
    'FALLBACK_TEXT',
    'BufferedSink',
    'EventStreamSink',
    'ResponseSink',
]
