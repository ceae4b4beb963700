"""
Chat history normalization for the conversation chain.
"""

from typing import Dict, List, Optional


def group_messages_by_conversation(messages: List[Dict[str, str]]) -> List[Dict[str, Optional[str]]]:
    """
    Pair consecutive human/ai messages into conversation exchanges.

    Args:
        messages: Ordered `{"type": "human"|"ai", "content": str}` items

    Returns:
        Ordered `{"human": str|None, "ai": str|None}` exchanges. A human
        message without a following ai reply, or an ai message without a
        preceding human one, yields an exchange with the other side None.
    """
    conversations: List[Dict[str, Optional[str]]] = []
    current: Optional[Dict[str, Optional[str]]] = None

    for message in messages:
        role = message.get("type")
        content = message.get("content", "")

        if role == "human":
            if current is not None:
                conversations.append(current)
            current = {"human": content, "ai": None}
        elif role == "ai":
            if current is None or current["ai"] is not None:
                if current is not None:
                    conversations.append(current)
                current = {"human": None, "ai": content}
            else:
                current["ai"] = content

    if current is not None:
        conversations.append(current)

    return conversations


def format_chat_history(conversations: List[Dict[str, Optional[str]]]) -> str:
    """Render grouped exchanges as prompt text."""
    lines = []
    for exchange in conversations:
        if exchange.get("human"):
            lines.append(f"Human: {exchange['human']}")
        if exchange.get("ai"):
            lines.append(f"Assistant: {exchange['ai']}")
    return "\n".join(lines)
