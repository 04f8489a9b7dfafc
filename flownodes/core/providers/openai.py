"""
OpenAI API 클라이언트 구현
"""
from typing import List, Dict, Any, Optional
import logging
import httpx
from openai import AsyncOpenAI
from openai import APIError, APIConnectionError, RateLimitError

from flownodes.core.llm_base import BaseLLMClient
from flownodes.core.llm_registry import register_provider
from flownodes.core.providers.config import OpenAIConfig
from flownodes.core.exceptions import (
    ProviderError,
    ProviderRateLimitError,
    TransportError,
)

logger = logging.getLogger(__name__)


@register_provider("openai")
class OpenAIClient(BaseLLMClient):
    """OpenAI Chat Completions API 클라이언트"""

    def __init__(self, config: OpenAIConfig):
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout, connect=config.connect_timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10)
        )
        self.config = config
        self.client = AsyncOpenAI(
            api_key=config.api_key.get_secret_value(),
            organization=config.organization,
            base_url=config.base_url,
            max_retries=config.max_retries,
            http_client=http_client,
        )
        self.model = config.model
        self.system_prompt = config.system_prompt
        logger.info("OpenAI Client 초기화: 모델=%s", self.model)
        self.last_usage: Optional[Dict[str, Any]] = None

    @staticmethod
    def _token_param_for_model(model_name: str) -> str:
        """모델에 맞는 토큰 파라미터명 반환"""
        normalized = (model_name or "").lower()
        completion_prefixes = ("gpt-4o", "gpt-4.1", "gpt-5", "o1", "o3", "o4")
        if normalized.startswith(completion_prefixes):
            return "max_completion_tokens"
        return "max_tokens"

    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """설정과 호출 옵션을 합쳐 chat.completions.create 파라미터 구성 (None 값 제외)"""
        options = dict(options or {})
        config = self.config

        model_name = options.pop("model", None) or self.model
        max_tokens = options.pop("max_tokens", None) or config.max_tokens

        params: Dict[str, Any] = {
            "model": model_name,
            "temperature": options.pop("temperature", config.temperature),
            "top_p": options.pop("top_p", config.top_p),
            "frequency_penalty": options.pop("frequency_penalty", config.frequency_penalty),
            "presence_penalty": options.pop("presence_penalty", config.presence_penalty),
            "stop": options.pop("stop", None) or config.stop,
            self._token_param_for_model(model_name): max_tokens,
        }
        params.update(options)
        return {key: value for key, value in params.items() if value is not None}

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        params: Optional[Dict[str, Any]] = None,
        **options
    ) -> str:
        """비동기 완료 생성"""
        request = dict(params) if params is not None else self.invocation_params(options)
        model_name = request.get("model", self.model)

        if self.system_prompt and not any(m.get("role") == "system" for m in messages):
            final_messages = [{"role": "system", "content": self.system_prompt}, *messages]
        else:
            final_messages = list(messages)

        try:
            self.last_usage = None
            response = await self.client.chat.completions.create(
                messages=final_messages,
                **request
            )
        except RateLimitError as e:
            logger.error(f"OpenAI API 사용량 제한: {e}")
            raise ProviderRateLimitError(
                message="OpenAI API 사용량 제한에 도달했습니다",
                details={"model": model_name, "error": str(e)}
            ) from e
        except APIConnectionError as e:
            logger.error(f"OpenAI API 연결 실패: {e}")
            raise TransportError(
                message=f"OpenAI API에 연결할 수 없습니다: {str(e)}",
                details={"model": model_name, "error_type": type(e).__name__}
            ) from e
        except APIError as e:
            logger.error(f"OpenAI API 오류: {e}")
            raise ProviderError(
                message=f"OpenAI API 호출 중 오류가 발생했습니다: {str(e)}",
                details={"model": model_name, "error": str(e)}
            ) from e

        self._capture_usage(getattr(response, "usage", None), model_name)

        if not response.choices:
            logger.error("OpenAI API 응답에 choices가 없습니다")
            raise ProviderError(
                message="OpenAI API 응답이 비어있습니다",
                details={"model": model_name}
            )

        return response.choices[0].message.content or ""

    def _capture_usage(self, usage: Optional[Any], model_name: str) -> None:
        """토큰 사용량 메타데이터 저장"""
        if not usage:
            self.last_usage = None
            return

        prompt_tokens = int(getattr(usage, "prompt_tokens", 0) or 0)
        completion_tokens = int(getattr(usage, "completion_tokens", 0) or 0)
        self.last_usage = {
            "input_tokens": prompt_tokens,
            "output_tokens": completion_tokens,
            "total_tokens": int(getattr(usage, "total_tokens", 0) or prompt_tokens + completion_tokens),
            "model": model_name
        }

    async def aclose(self) -> None:
        await self.client.close()
