from __future__ import annotations

from fastapi import HTTPException, status

from src.domain.errors import (
    AnalysisError,
    ContentFilteredError,
    MissingSceneError,
    NoImageError,
    PromptGenerationError,
    RateLimitError,
    ReframeError,
    SessionNotFoundError,
    SynthesisError,
)

# Most specific first
_STATUS_BY_ERROR: list[tuple[type[ReframeError], int]] = [
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (MissingSceneError, status.HTTP_400_BAD_REQUEST),
    (NoImageError, status.HTTP_400_BAD_REQUEST),
    (RateLimitError, status.HTTP_429_TOO_MANY_REQUESTS),
    (ContentFilteredError, status.HTTP_400_BAD_REQUEST),
    (PromptGenerationError, status.HTTP_502_BAD_GATEWAY),
    (SynthesisError, status.HTTP_502_BAD_GATEWAY),
    (AnalysisError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def http_status_for(error: ReframeError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(error: ReframeError) -> HTTPException:
    return HTTPException(status_code=http_status_for(error), detail=error.message)
