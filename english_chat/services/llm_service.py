"""LLM service with ordered provider fallback and cost tracking."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Protocol, Sequence

import httpx
from loguru import logger
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_exponential

from english_chat.config import Settings, settings as default_settings


@dataclass
class LLMResult:
    """Structured response returned by the :class:`LLMService`."""

    provider: str
    model: str
    content: str
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    cost: float
    raw_response: Dict[str, Any]


class LLMProviderError(RuntimeError):
    """Raised when a provider returns an error response or cannot be reached."""


class BaseLLMProvider(Protocol):
    """Protocol shared by provider implementations."""

    name: str

    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:  # pragma: no cover - interface definition
        """Generate a chat completion."""


def _retrying(max_attempts: int) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((httpx.TransportError, LLMProviderError)),
        before_sleep=before_sleep_log(logger, "warning"),
        reraise=True,
    )


@dataclass
class OpenAIProvider:
    """Generate chat completions using an OpenAI-compatible API."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    request_timeout: float = 30.0
    max_retries: int = 1
    organization: Optional[str] = None

    name: str = "openai"

    COST_PER_1K_TOKENS: ClassVar[Dict[str, Dict[str, float]]] = {
        "gpt-4o-mini": {"prompt": 0.00015, "completion": 0.0006},
        "gpt-4o": {"prompt": 0.0025, "completion": 0.01},
        "gpt-3.5-turbo": {"prompt": 0.0005, "completion": 0.0015},
    }

    def _build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        return headers

    def _estimate_cost(self, model: str, usage: Dict[str, Any]) -> float:
        model_rates = self.COST_PER_1K_TOKENS.get(model, {"prompt": 0.0, "completion": 0.0})
        prompt_cost = (usage.get("prompt_tokens", 0) / 1000) * model_rates["prompt"]
        completion_cost = (usage.get("completion_tokens", 0) / 1000) * model_rates["completion"]
        return round(prompt_cost + completion_cost, 6)

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            response = client.post("/chat/completions", json=payload, headers=self._build_headers())
        if response.status_code >= 400:
            logger.error("OpenAI returned error", status=response.status_code, body=response.text)
            raise LLMProviderError(f"OpenAI error {response.status_code}: {response.text}")
        return response

    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "messages": list(messages),
            "temperature": kwargs.get("temperature", 0.7),
        }
        if "max_tokens" in kwargs:
            payload["max_tokens"] = kwargs["max_tokens"]

        response = _retrying(self.max_retries)(self._post, payload)

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMProviderError(f"{self.name} returned a non-JSON body") from exc
        choice = (data.get("choices") or [{}])[0]
        # An empty completion is a legitimate reply.
        content = choice.get("message", {}).get("content") or ""

        usage = data.get("usage", {})
        result = LLMResult(
            provider=self.name,
            model=payload["model"],
            content=content.strip(),
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            total_tokens=usage.get("total_tokens", usage.get("prompt_tokens", 0) + usage.get("completion_tokens", 0)),
            cost=self._estimate_cost(payload["model"], usage),
            raw_response=data,
        )
        logger.info(
            "OpenAI completion success",
            model=result.model,
            tokens=result.total_tokens,
            cost=result.cost,
        )
        return result


@dataclass
class AnthropicProvider:
    """Generate chat completions using the Anthropic API."""

    api_key: str
    model: str
    base_url: str = "https://api.anthropic.com/v1"
    request_timeout: float = 30.0
    max_retries: int = 1

    name: str = "anthropic"

    COST_PER_1K_TOKENS: ClassVar[Dict[str, Dict[str, float]]] = {
        "claude-3-5-sonnet": {"prompt": 0.003, "completion": 0.015},
        "claude-3-sonnet": {"prompt": 0.003, "completion": 0.015},
    }

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        with httpx.Client(base_url=self.base_url, timeout=self.request_timeout) as client:
            response = client.post("/messages", json=payload, headers=headers)
        if response.status_code >= 400:
            logger.error("Anthropic returned error", status=response.status_code, body=response.text)
            raise LLMProviderError(f"Anthropic error {response.status_code}: {response.text}")
        return response

    def generate(self, messages: Sequence[Dict[str, str]], **kwargs: Any) -> LLMResult:
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "max_tokens": kwargs.get("max_tokens", 512),
            "messages": [
                {"role": message["role"], "content": message["content"]}
                for message in messages
            ],
            "temperature": kwargs.get("temperature", 0.7),
        }
        if "system" in kwargs:
            payload["system"] = kwargs["system"]

        response = _retrying(self.max_retries)(self._post, payload)

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMProviderError(f"{self.name} returned a non-JSON body") from exc
        contents = data.get("content", [])
        content_chunks = [chunk.get("text", "") for chunk in contents if chunk.get("type") == "text"]
        content = "\n".join(filter(None, content_chunks)).strip()

        usage = data.get("usage", {})
        prompt_tokens = usage.get("input_tokens", 0)
        completion_tokens = usage.get("output_tokens", 0)
        cost_info = self.COST_PER_1K_TOKENS.get(payload["model"], {"prompt": 0.0, "completion": 0.0})
        cost = round((prompt_tokens / 1000) * cost_info["prompt"] + (completion_tokens / 1000) * cost_info["completion"], 6)

        result = LLMResult(
            provider=self.name,
            model=payload["model"],
            content=content,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            cost=cost,
            raw_response=data,
        )
        logger.info(
            "Anthropic completion success",
            model=result.model,
            tokens=result.total_tokens,
            cost=result.cost,
        )
        return result


class LLMService:
    """Coordinate chat completion requests across providers."""

    def __init__(
        self,
        providers: Optional[Sequence[BaseLLMProvider]] = None,
        primary: Optional[str] = None,
        secondary: Optional[str] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        if providers is not None:
            self._providers = list(providers)
        else:
            self._providers = self._build_default_providers()
        if not self._providers:
            raise ValueError("LLMService requires at least one provider")

        self._providers_by_name = {provider.name: provider for provider in self._providers}
        resolved_primary = primary or self.config.PRIMARY_LLM_PROVIDER
        resolved_secondary = secondary or self.config.SECONDARY_LLM_PROVIDER
        self._provider_order = self._build_order(resolved_primary, resolved_secondary)

    def _build_default_providers(self) -> List[BaseLLMProvider]:
        provider_list: List[BaseLLMProvider] = []
        if self.config.OPENAI_API_KEY:
            provider_list.append(
                OpenAIProvider(
                    api_key=self.config.OPENAI_API_KEY,
                    model=self.config.OPENAI_MODEL,
                    base_url=str(self.config.OPENAI_API_BASE or "https://api.openai.com/v1"),
                    request_timeout=self.config.LLM_REQUEST_TIMEOUT_SECONDS,
                    max_retries=self.config.LLM_MAX_RETRIES,
                    organization=self.config.OPENAI_ORG_ID,
                )
            )
        if self.config.ANTHROPIC_API_KEY:
            provider_list.append(
                AnthropicProvider(
                    api_key=self.config.ANTHROPIC_API_KEY,
                    model=self.config.ANTHROPIC_MODEL,
                    base_url=str(self.config.ANTHROPIC_API_BASE or "https://api.anthropic.com/v1"),
                    request_timeout=self.config.LLM_REQUEST_TIMEOUT_SECONDS,
                    max_retries=self.config.LLM_MAX_RETRIES,
                )
            )
        return provider_list

    def _build_order(self, primary: Optional[str], secondary: Optional[str]) -> List[BaseLLMProvider]:
        ordered: List[BaseLLMProvider] = []
        seen: set[str] = set()

        def maybe_add(name: Optional[str]) -> None:
            if not name:
                return
            provider = self._providers_by_name.get(name)
            if provider and provider.name not in seen:
                ordered.append(provider)
                seen.add(provider.name)

        maybe_add(primary)
        maybe_add(secondary)
        for provider in self._providers:
            if provider.name in seen:
                continue
            ordered.append(provider)
        return ordered

    @property
    def provider_names(self) -> List[str]:
        """Names of the configured providers in the order they are tried."""

        return [provider.name for provider in self._provider_order]

    def generate_chat_completion(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 512,
        system_prompt: Optional[str] = None,
    ) -> LLMResult:
        """Generate a chat completion using the configured providers."""

        errors: List[str] = []
        for provider in self._provider_order:
            payload_kwargs: Dict[str, Any] = {
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
            if system_prompt and provider.name == "anthropic":
                payload_kwargs["system"] = system_prompt
            provider_messages = messages
            if system_prompt and provider.name != "anthropic":
                provider_messages = [{"role": "system", "content": system_prompt}, *messages]
            try:
                result = provider.generate(provider_messages, **payload_kwargs)
            except (LLMProviderError, httpx.HTTPError) as exc:
                logger.warning("LLM provider failure", provider=provider.name, error=str(exc))
                errors.append(f"{provider.name}: {exc}")
                continue
            logger.debug(
                "LLM provider success",
                provider=provider.name,
                tokens=result.total_tokens,
                cost=result.cost,
            )
            return result
        raise LLMProviderError("; ".join(errors))


__all__ = [
    "AnthropicProvider",
    "BaseLLMProvider",
    "LLMProviderError",
    "LLMResult",
    "LLMService",
    "OpenAIProvider",
]
