import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from quizgen.services.completion_log import CompletionLogSink

PROVIDER_BASE_URLS: Dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}


@dataclass(frozen=True)
class ModelCapabilities:
    supports_sampling: bool = True
    supports_token_limit: bool = True


DEFAULT_CAPABILITIES = ModelCapabilities()

_FIXED_GENERATION = ModelCapabilities(supports_sampling=False, supports_token_limit=False)

# 모델 이름 prefix(대소문자 무시) → 파라미터 차이. 긴 prefix가 우선한다.
MODEL_CAPABILITIES: Dict[str, ModelCapabilities] = {
    "o1": _FIXED_GENERATION,
    "o3": _FIXED_GENERATION,
    "o4": _FIXED_GENERATION,
    "gpt-5": _FIXED_GENERATION,
}


def capabilities_for(model: str) -> ModelCapabilities:
    name = (model or "").strip().lower()
    if "/" in name:
        # "openai/o3-mini" 같은 라우터 표기
        name = name.rsplit("/", 1)[-1]
    for prefix in sorted(MODEL_CAPABILITIES, key=len, reverse=True):
        if name.startswith(prefix.lower()):
            return MODEL_CAPABILITIES[prefix]
    return DEFAULT_CAPABILITIES


def estimate_tokens(text: str) -> int:
    """Rough token count for providers that omit usage: 1 token per 4 characters."""
    return math.ceil(len(text or "") / 4)


class CompletionClientError(Exception):
    """Raised when the provider could not return a usable completion."""


@dataclass
class CompletionResult:
    text: str
    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass
class CompletionClient:
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    completion_log: Optional[CompletionLogSink] = None
    session: requests.Session = field(default_factory=requests.Session)

    def __post_init__(self):
        self.logger = logging.getLogger(__name__)

    def complete(
        self,
        prompt: str,
        *,
        provider: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
    ) -> CompletionResult:
        """
        Send one user message to an OpenAI-compatible chat endpoint.

        Every call is written to the completion log, including failed ones.
        """
        start = time.perf_counter()
        result: CompletionResult | None = None
        error: CompletionClientError | None = None
        try:
            result = self._request(prompt, provider, model, temperature, max_tokens, timeout_seconds)
        except CompletionClientError as exc:
            error = exc
        response_time_ms = int((time.perf_counter() - start) * 1000)

        self._record(
            prompt=prompt,
            result=result,
            error=error,
            provider=provider,
            model=model,
            temperature=temperature,
            response_time_ms=response_time_ms,
        )

        if error is not None:
            raise error
        return result

    def _endpoint(self, provider: str) -> str:
        base = self.base_url or PROVIDER_BASE_URLS.get((provider or "").lower())
        if not base:
            raise CompletionClientError(f"Unknown completion provider: {provider!r}")
        base = base.rstrip("/")
        if base.endswith("/chat/completions"):
            return base
        return f"{base}/chat/completions"

    def _build_payload(self, prompt: str, model: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        caps = capabilities_for(model)
        payload: Dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if caps.supports_token_limit:
            payload["max_tokens"] = max_tokens
        if caps.supports_sampling:
            payload.update(
                {
                    "temperature": temperature,
                    "frequency_penalty": 0,
                    "presence_penalty": 0,
                    "top_p": 1,
                }
            )
        return payload

    def _request(
        self,
        prompt: str,
        provider: str,
        model: str,
        temperature: float,
        max_tokens: int,
        timeout_seconds: int,
    ) -> CompletionResult:
        url = self._endpoint(provider)
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        payload = self._build_payload(prompt, model, temperature, max_tokens)

        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=timeout_seconds)
        except requests.RequestException as exc:
            raise CompletionClientError(f"Completion request failed: {exc}") from exc

        if resp.status_code >= 300:
            raise CompletionClientError(f"Completion API error status={resp.status_code} body={resp.text[:500]}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise CompletionClientError(f"Completion response is not JSON: {resp.text[:200]}") from exc

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionClientError(f"Malformed completion response: {str(data)[:500]}") from exc
        if not isinstance(text, str):
            raise CompletionClientError(f"Completion content is not text: {text!r}")

        usage = data.get("usage")
        if not isinstance(usage, dict):
            if usage:
                self.logger.warning("Ignoring malformed usage in completion response: %r", usage)
            usage = {}

        try:
            input_tokens = self._token_count(usage, "prompt_tokens", lambda: estimate_tokens(prompt))
            output_tokens = self._token_count(usage, "completion_tokens", lambda: estimate_tokens(text))
            total_tokens = self._token_count(usage, "total_tokens", lambda: input_tokens + output_tokens)
        except (TypeError, ValueError) as exc:
            raise CompletionClientError(f"Malformed token usage in completion response: {usage!r}") from exc

        return CompletionResult(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
        )

    @staticmethod
    def _token_count(usage: Dict[str, Any], key: str, estimate) -> int:
        value = usage.get(key)
        if value is None:
            return estimate()
        if isinstance(value, bool):
            raise TypeError(f"{key} is a boolean")
        return int(value)

    def _record(
        self,
        *,
        prompt: str,
        result: CompletionResult | None,
        error: CompletionClientError | None,
        provider: str,
        model: str,
        temperature: float,
        response_time_ms: int,
    ) -> None:
        if result is not None:
            input_tokens, output_tokens, total_tokens = result.input_tokens, result.output_tokens, result.total_tokens
            response_text = result.text
        else:
            input_tokens = estimate_tokens(prompt)
            output_tokens = 0
            total_tokens = input_tokens
            response_text = ""

        if self.completion_log is not None:
            self.completion_log.append(
                request=prompt,
                response=response_text,
                model=model,
                provider=provider,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                total_tokens=total_tokens,
                temperature=temperature,
                response_time_ms=response_time_ms,
                error=str(error) if error else None,
            )

        if error is not None:
            self.logger.error(
                "Completion request failed provider=%s model=%s elapsed_ms=%s: %s",
                provider,
                model,
                response_time_ms,
                error,
            )
        else:
            self.logger.info(
                "Completion request - message: %s, response: %s",
                prompt,
                response_text,
                extra={
                    "provider": provider,
                    "model": model,
                    "total_tokens": total_tokens,
                    "elapsed_ms": response_time_ms,
                },
            )
