"""Shared behaviour for providers backed by a chat-completion style API."""

from __future__ import annotations

import json
import logging
from abc import abstractmethod
from typing import Any

import httpx

from logscrub.core.chunking import split_into_chunks
from logscrub.core.guards import looks_like_false_positive_hostname, revert_false_positives
from logscrub.core.models import (
    MappingEntry,
    SanitizationOptions,
    SanitizationResult,
    SensitiveDataOptions,
)

from .base import (
    AIProviderError,
    AuthenticationError,
    BaseAIProvider,
    InvalidRequestError,
    RateLimitError,
    TransientProviderError,
)
from .parsing import parse_json_object, read_mappings, read_sanitized_text
from .prompts import build_analysis_prompt, build_sanitization_prompt
from .retry import RETRYABLE_STATUS_CODES, RetryPolicy, parse_retry_after

logger = logging.getLogger(__name__)


class ChatCompletionProvider(BaseAIProvider):
    """
    Base class for providers that send a system prompt plus log text to a model.

    Subclasses run one completion (`_complete`) and return the model's message
    content. This class handles configuration checks, chunking, best-effort
    JSON parsing and the false-positive hostname guard.
    """

    DEFAULT_TIMEOUT = 300.0  # Large chunks can take minutes
    DEFAULT_MAX_CHUNK_TOKENS = 6000
    ANALYSIS_TEMPERATURE = 0.0
    SANITIZATION_TEMPERATURE = 0.1

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_chunk_tokens: int = DEFAULT_MAX_CHUNK_TOKENS,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize shared provider state.

        Args:
            timeout: Timeout in seconds for each network round trip
            max_chunk_tokens: Estimated token budget per request
            retry_policy: Retry behaviour for transient failures
        """
        self._timeout = timeout
        self.max_chunk_tokens = max_chunk_tokens
        self._retry = retry_policy or RetryPolicy()

    @property
    def model_name(self) -> str:
        """Model or deployment the provider talks to."""
        return ""

    def _missing_configuration(self) -> str | None:
        """Name the setting that prevents a call even though the provider is configured."""
        return None

    @abstractmethod
    async def _complete(self, system_prompt: str, text: str, temperature: float) -> str:
        """
        Run one completion and return the model's message content.

        Raises:
            AIProviderError: On transport failure after retries, non-retryable
                errors, or an unreadable response envelope
        """

    async def analyze_text(self, text: str, options: SensitiveDataOptions) -> str:
        if not self.is_configured:
            logger.warning(f"{self.provider_name} is not configured. Returning empty analysis.")
            return json.dumps({"provider": self.provider_name, "configured": False, "items": []})

        missing = self._missing_configuration()
        if missing:
            return json.dumps({"provider": self.provider_name, "error": f"Missing {missing}"})

        if not text:
            return json.dumps({"items": [], "model": self.model_name})

        prompt = build_analysis_prompt(options)
        items: list[dict[str, Any]] = []
        model = self.model_name
        offset = 0
        chunks = split_into_chunks(text, self.max_chunk_tokens)

        for chunk in chunks:
            try:
                content = await self._complete(prompt, chunk, self.ANALYSIS_TEMPERATURE)
            except AIProviderError as e:
                logger.error(f"{self.provider_name} analyze call failed: {e.message}")
                return json.dumps({"provider": self.provider_name, "error": e.message})

            parsed = parse_json_object(content)
            if not parsed.ok:
                logger.warning(
                    f"{self.provider_name} returned unparsable analysis JSON ({parsed.error})"
                )
                if len(chunks) == 1:
                    return parsed.raw
                offset += len(chunk)
                continue

            model = str(parsed.data.get("model") or model)
            chunk_items = parsed.data.get("items")
            if not isinstance(chunk_items, list):
                if chunk_items is not None:
                    logger.warning(
                        f"{self.provider_name} analysis 'items' is not a list; ignoring it"
                    )
                chunk_items = []
            for item in chunk_items:
                if not isinstance(item, dict):
                    continue
                if str(item.get("type", "")).lower() == "hostname" and (
                    looks_like_false_positive_hostname(str(item.get("value", "")))
                ):
                    continue
                if isinstance(item.get("start"), int):
                    item = {**item, "start": item["start"] + offset}
                items.append(item)
            offset += len(chunk)

        return json.dumps({"items": items, "model": model})

    async def sanitize(self, text: str, options: SanitizationOptions) -> SanitizationResult:
        if not self.is_configured:
            return SanitizationResult.failure(text, f"{self.provider_name} provider not configured")

        missing = self._missing_configuration()
        if missing:
            return SanitizationResult.failure(text, f"Missing configuration: {missing}")

        if not text:
            return SanitizationResult(original_text=text, sanitized_text=text, success=True)

        chunks = split_into_chunks(text, self.max_chunk_tokens)
        if len(chunks) > 1:
            logger.info(f"{self.provider_name} sanitizing input in {len(chunks)} chunks")

        prompt = build_sanitization_prompt(options)
        parts: list[str] = []
        mappings: list[MappingEntry] = []
        seen: set[str] = set()

        for index, chunk in enumerate(chunks, start=1):
            result = await self._sanitize_chunk(prompt, chunk)
            if not result.success:
                error = result.error or "Unknown error"
                if len(chunks) > 1:
                    error = f"Chunk {index} of {len(chunks)} failed: {error}"
                return SanitizationResult.failure(text, error)

            parts.append(result.sanitized_text)
            for mapping in result.mappings:
                if mapping.original not in seen:
                    seen.add(mapping.original)
                    mappings.append(mapping)

        return SanitizationResult(
            original_text=text,
            sanitized_text="".join(parts),
            mappings=mappings,
            success=True,
        )

    async def _sanitize_chunk(self, prompt: str, chunk: str) -> SanitizationResult:
        try:
            content = await self._complete(prompt, chunk, self.SANITIZATION_TEMPERATURE)
        except AIProviderError as e:
            logger.error(f"{self.provider_name} sanitize call failed: {e.message}")
            return SanitizationResult.failure(chunk, e.message)

        parsed = parse_json_object(content)
        if not parsed.ok:
            logger.warning(
                f"Failed to parse {self.provider_name} sanitization JSON ({parsed.error}); "
                "returning chunk unchanged"
            )
            return SanitizationResult(original_text=chunk, sanitized_text=chunk, success=True)

        sanitized_text = read_sanitized_text(parsed.data, chunk)
        sanitized_text, mappings = revert_false_positives(sanitized_text, read_mappings(parsed.data))
        return SanitizationResult(
            original_text=chunk,
            sanitized_text=sanitized_text,
            mappings=mappings,
            success=True,
        )


class HttpChatCompletionProvider(ChatCompletionProvider):
    """
    Chat-completion provider that talks to its API over HTTP.

    Subclasses describe the request (`_build_request`) and where the message
    content sits in the response (`_extract_content`). One `httpx.AsyncClient`
    is shared by all calls of a provider instance.
    """

    def __init__(
        self,
        timeout: float = ChatCompletionProvider.DEFAULT_TIMEOUT,
        max_chunk_tokens: int = ChatCompletionProvider.DEFAULT_MAX_CHUNK_TOKENS,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        super().__init__(
            timeout=timeout,
            max_chunk_tokens=max_chunk_tokens,
            retry_policy=retry_policy,
        )
        self._http_client = http_client

    @abstractmethod
    def _build_request(
        self, system_prompt: str, text: str, temperature: float
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """
        Describe the HTTP request for one completion.

        Returns:
            Tuple of (url, headers, JSON body)
        """

    def _extract_content(self, body: dict[str, Any]) -> str | None:
        """Pull the message content out of an OpenAI-compatible response body."""
        choices = body.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _complete(self, system_prompt: str, text: str, temperature: float) -> str:
        url, headers, payload = self._build_request(system_prompt, text, temperature)
        client = await self._get_http_client()

        async def send() -> httpx.Response:
            try:
                response = await client.post(url, json=payload, headers=headers)
            except httpx.TransportError as e:
                raise TransientProviderError(
                    message=f"{type(e).__name__}: {e}",
                    provider=self.provider_name,
                    error_code="transport_error",
                ) from e
            if response.status_code != 200:
                self._handle_http_error(response)
            return response

        response = await self._retry.run(send, provider=self.provider_name, description="request")

        try:
            body = response.json()
        except ValueError as e:
            raise AIProviderError(
                message=f"Response body is not valid JSON: {e}",
                provider=self.provider_name,
                error_code="invalid_envelope",
            ) from e

        content = self._extract_content(body) if isinstance(body, dict) else None
        if content is None:
            raise AIProviderError(
                message="Response did not contain message content",
                provider=self.provider_name,
                error_code="invalid_envelope",
            )
        return content

    def _handle_http_error(self, response: httpx.Response) -> None:
        """
        Raise the error matching a non-200 response.

        Raises:
            RateLimitError: For 429 (retried)
            TransientProviderError: For 408 and 5xx gateway errors (retried)
            AuthenticationError: For 401/403
            InvalidRequestError: For 400
            AIProviderError: For anything else
        """
        status_code = response.status_code

        try:
            error_data = response.json()
            error_message = error_data.get("error", {}).get("message", response.text)
        except Exception:
            error_message = response.text or f"HTTP {status_code}"

        if status_code in RETRYABLE_STATUS_CODES:
            error_class = RateLimitError if status_code == 429 else TransientProviderError
            raise error_class(
                message=f"HTTP {status_code}: {error_message}",
                provider=self.provider_name,
                error_code=f"http_{status_code}",
                retry_after=parse_retry_after(response.headers.get("Retry-After")),
            )
        if status_code in (401, 403):
            raise AuthenticationError(
                message=f"Authentication failed ({status_code}): {error_message}",
                provider=self.provider_name,
                error_code="unauthorized" if status_code == 401 else "forbidden",
            )
        if status_code == 400:
            raise InvalidRequestError(
                message=f"Invalid request: {error_message}",
                provider=self.provider_name,
                error_code="bad_request",
            )
        raise AIProviderError(
            message=f"API error ({status_code}): {error_message}",
            provider=self.provider_name,
            error_code=f"http_{status_code}",
        )
