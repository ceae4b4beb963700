"""
Conversation chain: history grouping, prompts and the RAG turn.
"""

from .conversation import ConversationChain, create_chain, format_documents
from .history import format_chat_history, group_messages_by_conversation
from .prompts import (
    DEFAULT_QUESTION_TEMPLATE, DEFAULT_RESPONSE_TEMPLATE, fill_template,
)

__all__ = [
    'ConversationChain',
    'create_chain',
    'format_documents',
    'format_chat_history',
    'group_messages_by_conversation',
    'DEFAULT_QUESTION_TEMPLATE',
    'DEFAULT_RESPONSE_TEMPLATE',
    'fill_template',
]
