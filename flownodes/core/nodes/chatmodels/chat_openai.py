"""
ChatOpenAI 노드

OpenAI 채팅 모델을 만들어 호스트에 돌려줍니다.
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
from flownodes.core.providers.config import OpenAIConfig
from flownodes.core.providers.openai import OpenAIClient
from flownodes.core.vision import MultiModalOption, VisionChatModelMixin, VisionState

logger = logging.getLogger(__name__)


class ChatOpenAI(VisionChatModelMixin, BaseChatModel):
    """
    OpenAI 채팅 모델

    OpenAIClient에 호출을 위임합니다. 설정되지 않은 값은 None으로 빠지므로
    별도의 파라미터 필터링이 없습니다.
    """

    DEFAULT_IMAGE_MODEL = "gpt-4o"
    DEFAULT_IMAGE_MAX_TOKEN = 1024
    VISION_MODEL_PREFIXES = ("gpt-4o", "gpt-4-turbo", "gpt-4.1", "gpt-5", "o1", "o3", "o4")

    def __init__(self, id: str, client: OpenAIClient):
        self.id = id
        self._client = client
        self.vision_state = VisionState.capture(client.model, client.config.max_tokens)

    @property
    def client(self) -> OpenAIClient:
        return self._client

    @property
    def last_usage(self) -> Optional[Dict[str, Any]]:
        return self._client.last_usage

    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        merged: Dict[str, Any] = {"model": self.model_name}
        if self.max_tokens is not None:
            merged["max_tokens"] = self.max_tokens
        merged.update(options or {})
        return self._client.invocation_params(merged)

    async def invoke(self, messages: List[Dict[str, Any]], **options) -> str:
        params = self.invocation_params(options)
        logger.debug("ChatOpenAI invoke: id=%s, model=%s, mode=%s", self.id, params.get("model"), self.vision_mode.value)
        return await self._client.generate(messages, params=params)

    async def aclose(self) -> None:
        await self._client.aclose()

    def __repr__(self) -> str:
        return (
            f"ChatOpenAI(id={self.id}, model_name={self.model_name}, "
            f"max_tokens={self.max_tokens}, mode={self.vision_mode.value})"
        )


class ChatOpenAINode(BaseNode):
    """OpenAI 채팅 모델 노드"""

    def describe(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            label="ChatOpenAI",
            name="chatOpenAI",
            version=8.0,
            type="ChatOpenAI",
            icon="openai.svg",
            category="Chat Models",
            description="Wrapper around OpenAI large language models that use the Chat endpoint",
            base_classes=merge_base_classes(["ChatOpenAI"], get_base_classes(ChatOpenAI)),
            credential=CredentialSpec(credential_names=("openAIApi",)),
            inputs=(
                InputSpec(
                    label="Model Name",
                    name="modelName",
                    type=InputType.OPTIONS,
                    default="gpt-4o-mini",
                    options=(
                        OptionSpec(name="gpt-4.1", label="gpt-4.1"),
                        OptionSpec(name="gpt-4.1-mini", label="gpt-4.1-mini"),
                        OptionSpec(name="gpt-4o", label="gpt-4o"),
                        OptionSpec(name="gpt-4o-mini", label="gpt-4o-mini"),
                        OptionSpec(name="gpt-4-turbo", label="gpt-4-turbo"),
                        OptionSpec(name="gpt-3.5-turbo", label="gpt-3.5-turbo"),
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
                    label="Max Tokens",
                    name="maxTokens",
                    type=InputType.NUMBER,
                    step=1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Top Probability",
                    name="topP",
                    type=InputType.NUMBER,
                    step=0.1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Frequency Penalty",
                    name="frequencyPenalty",
                    type=InputType.NUMBER,
                    step=0.1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Presence Penalty",
                    name="presencePenalty",
                    type=InputType.NUMBER,
                    step=0.1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Timeout",
                    name="timeout",
                    type=InputType.NUMBER,
                    step=1,
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="BasePath",
                    name="basePath",
                    type=InputType.STRING,
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
                InputSpec(
                    label="Image Resolution",
                    name="imageResolution",
                    type=InputType.OPTIONS,
                    description="This parameter controls the resolution in which the model views the image.",
                    default="low",
                    options=(
                        OptionSpec(name="low", label="Low"),
                        OptionSpec(name="high", label="High"),
                        OptionSpec(name="auto", label="Auto"),
                    ),
                    optional=True,
                    additional_params=True,
                ),
            ),
        )

    async def init(
        self,
        node_data: NodeData,
        flow_execution_id: str,
        context: ExecutionContext
    ) -> ChatOpenAI:
        inputs = self.resolve_inputs(node_data)
        credential_data = await self.resolve_credential(node_data, context)
        api_key = require_credential_param(
            "openAIApiKey",
            credential_data,
            node_data,
            message="OpenAI API Key가 자격증명에 없습니다",
        )

        # 숫자 입력은 값이 있을 때만 설정에 넘김 (나머지는 설정 기본값)
        numeric_fields = {
            "temperature": "temperature",
            "top_p": "topP",
            "frequency_penalty": "frequencyPenalty",
            "presence_penalty": "presencePenalty",
        }
        values: Dict[str, Any] = {
            field: float(inputs[name])
            for field, name in numeric_fields.items()
            if inputs[name] is not None
        }
        if inputs["maxTokens"] is not None:
            values["max_tokens"] = int(inputs["maxTokens"])

        config = self.build_config(
            OpenAIConfig,
            api_key=api_key,
            model=inputs["modelName"],
            base_url=inputs["basePath"] or settings.openai_base_url,
            timeout=float(inputs["timeout"]) if inputs["timeout"] else settings.provider_timeout,
            connect_timeout=settings.provider_connect_timeout,
            **values,
        )

        client = LLMProviderRegistry.create_client("openai", config=config)
        model = ChatOpenAI(node_data.id, client)
        model.set_multi_modal_option(
            MultiModalOption(image={
                "allowImageUploads": bool(inputs["allowImageUploads"]),
                "imageResolution": inputs["imageResolution"],
            })
        )

        self.log_init(
            node_data,
            flow_execution_id,
            f"ChatOpenAI 초기화: model={config.model}, api_key={mask_secret(api_key)}",
        )
        return model
