"""Completion client for the Gemini generateContent REST API."""
import asyncio
import logging
import time
from typing import Any, Optional, Tuple

import httpx

from config import GEMINI_API_KEY, GEMINI_API_URL, REQUEST_TIMEOUT_SECONDS
from models.generation import (
    FailureKind,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    GenerationSuccess,
)

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}
RATE_LIMITED_STATUSES = {"RESOURCE_EXHAUSTED"}


class CompletionClient:
    """
    Sends one prompt to the completion endpoint and classifies the outcome.

    Never raises for endpoint or transport problems; every outcome is a
    GenerationSuccess or a GenerationFailure. No retries are performed.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = GEMINI_API_URL,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the completion client.

        Args:
            api_key: Endpoint API key (defaults to GEMINI_API_KEY from environment)
            api_url: Full generateContent URL for the model
            timeout_seconds: Budget for a whole call, also applied per httpx phase
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.api_key = api_key or GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY must be provided or set in environment")

        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport
        )
        logger.info("CompletionClient initialized successfully")

    async def complete(self, request: GenerationRequest) -> GenerationResult:
        """
        Deliver the prompt and return the first candidate's text.

        Args:
            request: Prompt and sampling parameters

        Returns:
            GenerationSuccess with raw text, or GenerationFailure with a kind
        """
        start_time = time.time()
        logger.debug(f"Requesting completion: prompt_chars={len(request.prompt_text)}")

        try:
            response = await asyncio.wait_for(
                self._client.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=request.to_payload()
                ),
                timeout=self.timeout_seconds
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return self._failure(
                FailureKind.NETWORK,
                f"Request timed out after {self.timeout_seconds:g}s",
                start_time
            )
        except httpx.TransportError as e:
            return self._failure(FailureKind.NETWORK, f"Network error: {e}", start_time)
        except httpx.HTTPError as e:
            return self._failure(FailureKind.UNKNOWN, f"Unexpected HTTP error: {e}", start_time)

        if not response.is_success:
            kind, message = self._classify_error(response)
            return self._failure(kind, message, start_time, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            return self._failure(
                FailureKind.MALFORMED_RESPONSE,
                "Completion API returned a non-JSON body",
                start_time,
                status_code=response.status_code
            )

        text = self._extract_text(data)
        if text is None:
            return self._failure(
                FailureKind.MALFORMED_RESPONSE,
                "Invalid response format from completion API",
                start_time,
                status_code=response.status_code
            )

        latency_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Completion succeeded: chars={len(text)}, latency={latency_ms}ms",
            extra={"status_code": response.status_code, "latency_ms": latency_ms}
        )
        return GenerationSuccess(text=text, latency_ms=latency_ms)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    @staticmethod
    def _extract_text(data: Any) -> Optional[str]:
        """Return candidates[0].content.parts[0].text, or None if the shape differs."""
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
            return None
        text = parts[0].get("text")
        return text if isinstance(text, str) else None

    @staticmethod
    def _classify_error(response: httpx.Response) -> Tuple[FailureKind, str]:
        """
        Map a non-2xx response to a failure kind and message.

        Google APIs report errors as {"error": {"code", "message", "status"}};
        the message is kept, and the raw body is used when it is absent.
        """
        message = ""
        status = ""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            message = str(body["error"].get("message") or "")
            status = str(body["error"].get("status") or "")
        if not message:
            message = response.text.strip() or response.reason_phrase

        lowered = message.lower()
        code = response.status_code

        if code in (401, 403) or status in UNAUTHORIZED_STATUSES or "api key" in lowered:
            return FailureKind.UNAUTHORIZED, message
        if code == 429 or status in RATE_LIMITED_STATUSES or "quota" in lowered:
            return FailureKind.RATE_LIMITED, message
        return FailureKind.UNKNOWN, f"Completion API error: {code} - {message}"

    def _failure(
        self,
        kind: FailureKind,
        message: str,
        start_time: float,
        status_code: Optional[int] = None
    ) -> GenerationFailure:
        latency_ms = int((time.time() - start_time) * 1000)
        logger.error(
            f"Completion failed: kind={kind.value}, status={status_code}, "
            f"latency={latency_ms}ms, error={message}",
            extra={"failure_kind": kind.value, "status_code": status_code, "latency_ms": latency_ms}
        )
        return GenerationFailure(
            kind=kind,
            message=message,
            status_code=status_code,
            latency_ms=latency_ms
        )
