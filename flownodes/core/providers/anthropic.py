"""
Anthropic Claude API 클라이언트 구현
"""
from typing import List, Dict, Optional, Any
import logging
import httpx
from anthropic import AsyncAnthropic
from anthropic import APIError, APIConnectionError, RateLimitError

from flownodes.core.llm_base import BaseLLMClient
from flownodes.core.llm_registry import register_provider
from flownodes.core.providers.config import AnthropicConfig, UNSET_SAMPLING_PARAM
from flownodes.core.exceptions import (
    ProviderError,
    ProviderRateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)


@register_provider("anthropic")
class AnthropicClient(BaseLLMClient):
    """
    Anthropic Claude API 클라이언트

    top_p / top_k는 설정되지 않은 경우 -1(UNSET)로 invocation_params에 포함됩니다.
    """

    UNSET = UNSET_SAMPLING_PARAM

    def __init__(self, config: AnthropicConfig):
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
        )
        self.config = config
        self.client = AsyncAnthropic(
            api_key=config.api_key.get_secret_value(),
            base_url=config.base_url,
            max_retries=config.max_retries,
            http_client=http_client,
        )
        self.model = config.model
        self.system_prompt = config.system_prompt
        logger.info("Anthropic Client 초기화: 모델=%s", self.model)
        self.last_usage: Optional[Dict[str, Any]] = None

    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        설정과 호출 옵션을 합쳐 messages.create 파라미터 구성

        호출 옵션이 설정값보다 우선합니다. top_p/top_k는 값이 없으면 UNSET(-1)을 유지합니다.
        """
        options = dict(options or {})
        config = self.config

        params: Dict[str, Any] = {
            "model": options.pop("model", None) or self.model,
            "max_tokens": options.pop("max_tokens", None) or config.max_tokens,
            "temperature": options.pop("temperature", config.temperature),
            "top_p": options.pop("top_p", config.top_p),
            "top_k": options.pop("top_k", config.top_k),
            "stop_sequences": options.pop("stop_sequences", None) or config.stop_sequences,
        }

        budget_tokens = options.pop("thinking_budget_tokens", config.thinking_budget_tokens)
        if budget_tokens:
            params["thinking"] = {"type": "enabled", "budget_tokens": budget_tokens}
            # extended thinking은 temperature를 기본값(1)으로만 허용
            params.pop("temperature")

        params.update(options)
        return {key: value for key, value in params.items() if value is not None}

    def _convert_messages(
        self, messages: List[Dict[str, Any]]
    ) -> tuple[Optional[str], List[Dict[str, Any]]]:
        """
        OpenAI 형식 메시지를 Anthropic 형식으로 변환

        OpenAI: [{"role": "system", ...}, {"role": "user", ...}]
        Anthropic: system 파라미터 분리 + messages는 user/assistant만
        """
        system_message = None
        converted_messages = []

        for msg in messages:
            if msg.get("role") == "system":
                system_message = msg.get("content")
            else:
                converted_messages.append(msg)

        if system_message is None:
            system_message = self.system_prompt

        return system_message, converted_messages

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        params: Optional[Dict[str, Any]] = None,
        **options
    ) -> str:
        """비동기 완료 생성"""
        request = dict(params) if params is not None else self.invocation_params(options)
        model_name = request.get("model", self.model)

        try:
            system_message, converted_messages = self._convert_messages(messages)
            if system_message:
                request["system"] = system_message

            self.last_usage = None

            response = await self.client.messages.create(
                messages=converted_messages,
                **request
            )

            self._capture_usage(getattr(response, "usage", None), model_name)

            # thinking 블록은 제외하고 text 블록만 연결
            return "".join(
                block.text for block in response.content
                if getattr(block, "type", None) == "text"
            )

        except RateLimitError as e:
            logger.error(f"Anthropic API 사용량 제한: {e}")
            raise ProviderRateLimitError(
                message="Anthropic API 사용량 제한에 도달했습니다",
                details={"model": model_name, "error": str(e)}
            ) from e
        except APIConnectionError as e:
            # APITimeoutError 포함
            logger.error(f"Anthropic API 연결 실패: {e}")
            raise TransportError(
                message=f"Anthropic API에 연결할 수 없습니다: {str(e)}",
                details={"model": model_name, "error_type": type(e).__name__}
            ) from e
        except APIError as e:
            logger.error(f"Anthropic API 오류: {e}")
            raise ProviderError(
                message=f"Anthropic API 호출 중 오류가 발생했습니다: {str(e)}",
                details={"model": model_name, "error": str(e)}
            ) from e

    def _capture_usage(self, usage: Optional[Any], model_name: str) -> None:
        """토큰 사용량 메타데이터 저장"""
        if not usage:
            self.last_usage = None
            return

        def _safe_get(field: str) -> int:
            if isinstance(usage, dict):
                return int(usage.get(field, 0) or 0)
            return int(getattr(usage, field, 0) or 0)

        input_tokens = _safe_get("input_tokens")
        output_tokens = _safe_get("output_tokens")

        self.last_usage = {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "cache_write_tokens": _safe_get("cache_creation_input_tokens"),
            "cache_read_tokens": _safe_get("cache_read_input_tokens"),
            "model": model_name
        }

    async def aclose(self) -> None:
        await self.client.close()
