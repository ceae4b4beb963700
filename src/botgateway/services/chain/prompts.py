"""
Prompt templates for question condensing and answering.

Bot templates are user-authored text, so they are filled by substituting the
known placeholders only; any other braces are left as written.
"""

import re
from typing import Dict, Optional

QUESTION_PLACEHOLDERS = ("chat_history", "question")
RESPONSE_PLACEHOLDERS = ("context", "chat_history", "question")

DEFAULT_QUESTION_TEMPLATE = """Given the following conversation and a follow up question, rephrase the follow up question to be a standalone question.

Chat History:
{chat_history}
Follow Up Input: {question}
Standalone question:"""

DEFAULT_RESPONSE_TEMPLATE = """You are a helpful AI assistant. Use the following pieces of context to answer the question at the end.
If you don't know the answer, just say you don't know. DO NOT try to make up an answer.
If the question is not related to the context, politely respond that you are tuned to only answer questions that are related to the context.

{context}

Chat History:
{chat_history}

Question: {question}
Helpful answer in markdown:"""

_PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")


def fill_template(template: str, values: Dict[str, str]) -> str:
    """
    Substitute `{name}` placeholders present in `values`.

    Unknown placeholders and stray braces are kept verbatim.
    """
    def _replace(match):
        name = match.group(1)
        if name in values:
            return values[name]
        return match.group(0)

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


def question_template_or_default(template: Optional[str]) -> str:
    return template if template and template.strip() else DEFAULT_QUESTION_TEMPLATE


def response_template_or_default(template: Optional[str]) -> str:
    return template if template and template.strip() else DEFAULT_RESPONSE_TEMPLATE
