"""
Retrieval-augmented conversation chain.

One turn: condense the follow-up into a standalone question (only when there
is history), retrieve supporting documents, then answer from them.
"""

from typing import Any, Dict, List, Optional

from ...shared import get_logger
from ...shared.infrastructure.ai import ChatModel
from ...shared.infrastructure.monitoring import timed_operation
from ...shared.models import RetrievedDocument
from ..retrieval import BaseRetriever
from .history import format_chat_history
from .prompts import fill_template, question_template_or_default, response_template_or_default


def format_documents(documents: List[RetrievedDocument]) -> str:
    return "\n\n".join(document.page_content for document in documents)


class ConversationChain:
    """
    Conversational RAG chain over a bot's retriever.

    `question_llm` only condenses questions and never streams to the client;
    `llm` produces the answer and may stream tokens.
    """

    def __init__(self,
                 llm: ChatModel,
                 question_llm: ChatModel,
                 question_template: Optional[str],
                 response_template: Optional[str],
                 retriever: BaseRetriever):
        self.logger = get_logger(__name__)
        self.llm = llm
        self.question_llm = question_llm
        self.question_template = question_template_or_default(question_template)
        self.response_template = response_template_or_default(response_template)
        self.retriever = retriever

    async def _condense_question(self, question: str, chat_history: str) -> str:
        prompt = fill_template(self.question_template, {
            "chat_history": chat_history,
            "question": question,
        })
        standalone = await self.question_llm.invoke([{"role": "user", "content": prompt}])
        standalone = standalone.strip()
        self.logger.debug(f"Condensed question: {standalone}")
        return standalone or question

    @timed_operation("chain_invoke")
    async def invoke(self, inputs: Dict[str, Any]) -> str:
        """
        Run one turn of the chain.

        Args:
            inputs: `question` (str) and `chat_history` (grouped exchanges)

        Returns:
            Generated answer text
        """
        question = inputs["question"]
        chat_history = format_chat_history(inputs.get("chat_history") or [])

        if chat_history:
            standalone_question = await self._condense_question(question, chat_history)
        else:
            standalone_question = question

        documents = await self.retriever.invoke(standalone_question)

        prompt = fill_template(self.response_template, {
            "context": format_documents(documents),
            "chat_history": chat_history,
            "question": standalone_question,
        })
        return await self.llm.invoke([{"role": "user", "content": prompt}])


def create_chain(llm: ChatModel,
                 question_llm: ChatModel,
                 question_template: Optional[str],
                 response_template: Optional[str],
                 retriever: BaseRetriever) -> ConversationChain:
    return ConversationChain(
        llm=llm,
        question_llm=question_llm,
        question_template=question_template,
        response_template=response_template,
        retriever=retriever,
    )
