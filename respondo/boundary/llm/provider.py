"""
OpenAI-compatible provider client.

Builds the AsyncOpenAI client shared by the embedding and chat adapters and
translates SDK failures into the project's error taxonomy. SDK retries are
disabled; each caller owns its retry policy.

Dependencies: openai, httpx
System role: Provider plumbing for the LLM boundary
"""

import httpx
import openai

from respondo.configs.llm import LLMSettings
from respondo.core.exceptions import RespondoException, TransportError, UpstreamError


def create_provider_client(
    settings: LLMSettings,
    http_client: httpx.AsyncClient | None = None,
) -> openai.AsyncOpenAI:
    """
    Build an AsyncOpenAI client for the configured provider.

    Args:
        settings: API key, base URL and timeouts
        http_client: Shared transport (the SDK creates its own when None)

    Returns:
        openai.AsyncOpenAI: Client with SDK retries turned off
    """
    return openai.AsyncOpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        timeout=httpx.Timeout(settings.request_timeout, connect=settings.connect_timeout),
        max_retries=0,
        http_client=http_client,
    )


def translate_provider_error(
    exc: Exception,
    operation: str,
    url: str | None = None,
) -> RespondoException:
    """
    Map an SDK or transport failure to TransportError or UpstreamError.

    Args:
        exc: Exception raised by the SDK or by httpx while reading a stream
        operation: Human-readable name of the call, used in the message
        url: Endpoint, kept for error context

    Returns:
        RespondoException: UpstreamError carrying the HTTP status when the
            provider answered, TransportError when no answer arrived
    """
    if isinstance(exc, openai.APIStatusError):
        return UpstreamError(
            f"{operation} returned {exc.status_code}",
            status_code=exc.status_code,
            details={"body": str(exc.message)[:500]},
        )
    if isinstance(exc, (openai.APIConnectionError, httpx.HTTPError)):
        return TransportError(f"{operation} failed: {exc}", url=url)
    return UpstreamError(f"{operation} failed: {exc}")
