"""
Bot chat API.

One-shot requests return `{bot: {text, sourceDocuments}, history}` as JSON.
Streaming requests return server-sent events: `chunk` per generated token,
then a single `result` event with the same payload.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ...services.chat_orchestrator import ChatOrchestrator, ChatRequest
from ...shared import get_settings

router = APIRouter(tags=["Bot API"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def get_orchestrator(request: Request) -> ChatOrchestrator:
    """Chat orchestrator created at application startup (dependency)."""
    return request.app.state.orchestrator


@router.post("/bot/{public_id}/api/v1/chat")
@router.post("/api/v1/bot/{public_id}/chat")
async def chat(public_id: str,
               body: ChatRequest,
               request: Request,
               orchestrator: ChatOrchestrator = Depends(get_orchestrator)):
    """
    Chat with a bot.

    Authorization and model resolution failures are raised before any
    stream is opened and rendered by the application's error handlers.
    """
    api_key = request.headers.get(get_settings().api_key_header)

    if body.stream:
        prepared = await orchestrator.open_stream(public_id, api_key)
        return StreamingResponse(
            orchestrator.stream(prepared, body),
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    result = await orchestrator.chat(public_id, api_key, body)
    return JSONResponse(content=result.to_payload())
