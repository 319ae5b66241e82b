# app/llm/service/normalizer.py
"""
Helpers that turn adapter output and failure information into the outward
response contract shared by /chat and /chat/compare.
"""

from typing import Any, Optional

from app.core.errors import ChatServiceError
from app.llm.entity.chat import ComparisonResult, NormalizedChatResponse


def extract_error_message(payload: Any) -> Optional[str]:
    """
    Pull a human-readable message out of a vendor error body.

    Vendors disagree on the shape: `{"error": {"message": ...}}` (OpenAI, Anthropic,
    Gemini, Mistral, the proxy), `{"error": "..."}` or a bare `{"message": ...}` (Cohere).
    """
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
        if isinstance(error, str) and error:
            return error
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def to_usage_total(usage: Any) -> Optional[int]:
    """Read `usage.total_tokens` from a dict or SDK object; never synthesize it."""
    if usage is None:
        return None
    total = usage.get("total_tokens") if isinstance(usage, dict) else getattr(usage, "total_tokens", None)
    return total if isinstance(total, int) else None


def chat_response(text: str, model_id: str, tokens_used: Optional[int] = None) -> NormalizedChatResponse:
    return NormalizedChatResponse(text=text, model_id=model_id, tokens_used=tokens_used)


EMPTY_RESPONSE_ERROR = "Empty response"


def comparison_success(model_id: str, response: NormalizedChatResponse, latency_ms: int) -> ComparisonResult:
    # A slot carries either non-empty text or an error, never neither.
    if not response.text:
        return ComparisonResult(model_id=model_id, text="", latency_ms=latency_ms, error=EMPTY_RESPONSE_ERROR)
    return ComparisonResult(model_id=model_id, text=response.text, latency_ms=latency_ms, error="")


def comparison_failure(model_id: str, error: Exception, latency_ms: int) -> ComparisonResult:
    if isinstance(error, ChatServiceError):
        message = error.message
    else:
        message = str(error)
    return ComparisonResult(
        model_id=model_id,
        text="",
        latency_ms=latency_ms,
        error=message or "Failed to get response",
    )


def to_chat_payload(response: NormalizedChatResponse) -> dict:
    """Outward /chat body: `{message, model, timestamp, tokensUsed?}`."""
    body = {
        "message": response.text,
        "model": response.model_id,
        "timestamp": response.produced_at.isoformat(),
    }
    if response.tokens_used is not None:
        body["tokensUsed"] = response.tokens_used
    return body


def to_comparison_payload(result: ComparisonResult) -> dict:
    return {
        "model": result.model_id,
        "text": result.text,
        "responseTime": result.latency_ms,
        "error": result.error,
    }
