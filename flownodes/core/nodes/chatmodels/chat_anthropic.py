"""
ChatAnthropic 노드

Anthropic Claude 채팅 모델을 만들어 호스트에 돌려줍니다.
"""

from typing import Any, Dict, List, Optional
import logging

from flownodes.config import settings
from flownodes.core.chat_models import BaseChatModel
from flownodes.core.credentials.resolver import require_credential_param
from flownodes.core.llm_registry import LLMProviderRegistry
from flownodes.core.logging_config import mask_secret
from flownodes.core.nodes.base_node import BaseNode, NodeData
from flownodes.core.nodes.context import ExecutionContext
from flownodes.core.nodes.descriptor import (
    CapabilityDescriptor,
    CredentialSpec,
    InputSpec,
    InputType,
    OptionSpec,
)
from flownodes.core.nodes.utils import get_base_classes, merge_base_classes
from flownodes.core.providers.anthropic import AnthropicClient
from flownodes.core.providers.config import AnthropicConfig, UNSET_SAMPLING_PARAM
from flownodes.core.vision import MultiModalOption, VisionChatModelMixin, VisionState

logger = logging.getLogger(__name__)

# upstream 클라이언트가 -1로 채우는 샘플링 파라미터
SENTINEL_PARAMS = ("top_p", "top_k")


def drop_unset_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """값이 UNSET(-1)인 top_p / top_k 제거 (다른 값은 그대로)"""
    return {
        key: value for key, value in params.items()
        if not (key in SENTINEL_PARAMS and value == UNSET_SAMPLING_PARAM)
    }


class ChatAnthropic(VisionChatModelMixin, BaseChatModel):
    """
    Anthropic 채팅 모델

    AnthropicClient를 내부에 두고 메시지 호출을 위임합니다.
    invocation_params만 감싸서 -1 값의 top_p / top_k를 요청에서 제외합니다.
    """

    DEFAULT_IMAGE_MODEL = "claude-3-5-haiku-latest"
    DEFAULT_IMAGE_MAX_TOKEN = 2048
    DEFAULT_MAX_TOKENS = 2048
    VISION_MODEL_PREFIXES = ("claude-3", "claude-sonnet-4", "claude-opus-4", "claude-haiku-4")

    def __init__(self, id: str, client: AnthropicClient, streaming: bool = False):
        self.id = id
        self.streaming = streaming
        self._client = client
        self.vision_state = VisionState.capture(
            client.model,
            client.config.max_tokens or self.DEFAULT_MAX_TOKENS,
        )

    @property
    def client(self) -> AnthropicClient:
        return self._client

    @property
    def last_usage(self) -> Optional[Dict[str, Any]]:
        return self._client.last_usage

    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        현재 모델/토큰 값과 호출 옵션으로 요청 파라미터 구성

        호출 옵션이 -1을 다시 넣을 수 있으므로 매 호출마다 필터링합니다.
        """
        merged = {"model": self.model_name, "max_tokens": self.max_tokens}
        merged.update(options or {})
        return drop_unset_params(self._client.invocation_params(merged))

    async def invoke(self, messages: List[Dict[str, Any]], **options) -> str:
        params = self.invocation_params(options)
        logger.debug("ChatAnthropic invoke: id=%s, model=%s, mode=%s", self.id, params.get("model"), self.vision_mode.value)
        return await self._client.generate(messages, params=params)

    async def aclose(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return (
            f"ChatAnthropic(id={self.id}, model_name={self.model_name}, "
            f"max_tokens={self.max_tokens}, mode={self.vision_mode.value})"
        )


class ChatAnthropicNode(BaseNode):
    """Anthropic 채팅 모델 노드"""

    def describe(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            label="ChatAnthropic",
            name="chatAnthropic",
            version=8.0,
            type="ChatAnthropic",
            icon="Anthropic.svg",
            category="Chat Models",
            description="Wrapper around ChatAnthropic large language models that use the Chat endpoint",
            base_classes=merge_base_classes(["ChatAnthropic"], get_base_classes(ChatAnthropic)),
            credential=CredentialSpec(credential_names=("anthropicApi",)),
            inputs=(
                InputSpec(
                    label="Model Name",
                    name="modelName",
                    type=InputType.OPTIONS,
                    default="claude-3-haiku-20240307",
                    options=(
                        OptionSpec(name="claude-sonnet-4-5", label="claude-sonnet-4-5"),
                        OptionSpec(name="claude-opus-4-1", label="claude-opus-4-1"),
                        OptionSpec(name="claude-sonnet-4-0", label="claude-sonnet-4-0"),
                        OptionSpec(name="claude-3-7-sonnet-latest", label="claude-3-7-sonnet-latest"),
                        OptionSpec(name="claude-3-5-haiku-latest", label="claude-3-5-haiku-latest"),
                        OptionSpec(name="claude-3-haiku-20240307", label="claude-3-haiku-20240307"),
                    ),
                ),
                InputSpec(
                    label="Temperature",
                    name="temperature",
                    type=InputType.NUMBER,
                    step=0.1,
                    default=0.9,
                    optional=True,
                ),
                InputSpec(
                    label="Streaming",
                    name="streaming",
                    type=InputType.BOOLEAN,
                    default=True,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Max Tokens",
                    name="maxTokensToSample",
                    type=InputType.NUMBER,
                    step=1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Top P",
                    name="topP",
                    type=InputType.NUMBER,
                    step=0.1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Top K",
                    name="topK",
                    type=InputType.NUMBER,
                    step=1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Extended Thinking",
                    name="extendedThinking",
                    type=InputType.BOOLEAN,
                    description="Enable extended thinking for reasoning model such as Claude Sonnet 3.7 and Claude 4",
                    default=False,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Budget Tokens",
                    name="budgetTokens",
                    type=InputType.NUMBER,
                    step=1,
                    default=1024,
                    description="Maximum number of tokens Claude is allowed use for its internal reasoning process",
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Allow Image Uploads",
                    name="allowImageUploads",
                    type=InputType.BOOLEAN,
                    description=(
                        "Allow image input. Images are sent to a vision-capable model "
                        "when the configured model cannot read them."
                    ),
                    default=False,
                    optional=True,
                ),
            ),
        )

    async def init(
        self,
        node_data: NodeData,
        flow_execution_id: str,
        context: ExecutionContext
    ) -> ChatAnthropic:
        inputs = self.resolve_inputs(node_data)
        credential_data = await self.resolve_credential(node_data, context)
        api_key = require_credential_param(
            "anthropicApiKey",
            credential_data,
            node_data,
            message="Anthropic API Key가 자격증명에 없습니다",
        )

        config = self.build_config(
            AnthropicConfig,
            api_key=api_key,
            model=inputs["modelName"],
            temperature=self._optional_float(inputs["temperature"]),
            # 정수 필드는 그대로 넘겨 소수 값은 설정 검증에서 거부
            max_tokens=inputs["maxTokensToSample"] or ChatAnthropic.DEFAULT_MAX_TOKENS,
            top_p=self._optional_float(inputs["topP"], UNSET_SAMPLING_PARAM),
            top_k=inputs["topK"] if inputs["topK"] is not None else UNSET_SAMPLING_PARAM,
            thinking_budget_tokens=inputs["budgetTokens"] if inputs["extendedThinking"] else None,
            base_url=settings.anthropic_base_url,
            timeout=settings.provider_timeout,
            connect_timeout=settings.provider_connect_timeout,
        )

        client = LLMProviderRegistry.create_client("anthropic", config=config)
        model = ChatAnthropic(node_data.id, client, streaming=bool(inputs["streaming"]))
        model.set_multi_modal_option(
            MultiModalOption(image={"allowImageUploads": bool(inputs["allowImageUploads"])})
        )

        self.log_init(
            node_data,
            flow_execution_id,
            f"ChatAnthropic 초기화: model={config.model}, api_key={mask_secret(api_key)}",
        )
        return model

    @staticmethod
    def _optional_float(value: Any, default: Any = None) -> Any:
        return float(value) if value is not None else default
