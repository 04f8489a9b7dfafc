"""
OpenAI 이미지 생성 도구 노드

프롬프트 하나를 받아 OpenAI Images API로 이미지를 생성하는 도구를 만듭니다.
도구 호출은 예외를 던지지 않고 항상 결과 문자열을 돌려줍니다.
"""

from typing import Awaitable, Callable
import logging

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from flownodes.core.credentials.resolver import require_credential_param
from flownodes.core.exceptions import ProviderError, TransportError
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
from flownodes.core.providers.openai_images import ImageGenerationRequest, OpenAIImageClient

logger = logging.getLogger(__name__)

DEFAULT_TOOL_NAME = "generate_image"
DEFAULT_TOOL_DESCRIPTION = (
    "Generate an image based on a text description. "
    "Use this when the user asks to create, draw, or generate an image."
)
NO_IMAGE_DATA_MESSAGE = "Failed to generate image: No image data returned"


class ImageGenerationInput(BaseModel):
    """이미지 생성 도구 인자"""
    prompt: str = Field(..., description="A detailed description of the image to generate")


def build_image_generator(
    api_key: str,
    model: str,
    size: str,
    quality: str
) -> Callable[[str], Awaitable[str]]:
    """
    이미지 생성 코루틴 생성

    API 키는 이 클로저 안에만 보관됩니다.
    """

    async def generate_image(prompt: str) -> str:
        request = ImageGenerationRequest(model=model, prompt=prompt, size=size, quality=quality)

        try:
            async with OpenAIImageClient(api_key) as client:
                response = await client.generate(request)
        except ProviderError as e:
            logger.warning(f"Image generation failed: model={model}, error={e.message}")
            return f"Error generating image: {e.message}"
        except TransportError as e:
            logger.warning(f"Image generation service unreachable: model={model}, error={e.message}")
            return f"Error contacting image generation service: {e.message}"
        except Exception as e:
            # 도구 호출은 에이전트 루프를 끊지 않도록 항상 문자열을 반환
            logger.exception(f"Unexpected image generation failure: model={model}")
            return f"Error contacting image generation service: {e}"

        image = response.first
        if image is None:
            return NO_IMAGE_DATA_MESSAGE
        if image.url:
            return f"Image generated successfully! View it here: {image.url}"
        if image.b64_json:
            return (
                "Image generated successfully! The image was returned inline as "
                f"base64-encoded data ({len(image.b64_json)} characters)."
            )
        return NO_IMAGE_DATA_MESSAGE

    return generate_image


class OpenAIImageGenNode(BaseNode):
    """OpenAI 이미지 생성 도구 노드"""

    def describe(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            label="OpenAI Image Generation",
            name="openAIImageGen",
            version=1.0,
            type="OpenAIImageGen",
            icon="openai.svg",
            category="Tools",
            description="Generate images from text descriptions using OpenAI image models",
            base_classes=merge_base_classes(["OpenAIImageGen", "Tool"], get_base_classes(StructuredTool)),
            credential=CredentialSpec(credential_names=("openAIApi",)),
            inputs=(
                InputSpec(
                    label="Model",
                    name="model",
                    type=InputType.OPTIONS,
                    default="gpt-image-1",
                    options=(
                        OptionSpec(
                            name="gpt-image-1",
                            label="GPT Image 1",
                            description="Latest image generation model with superior instruction following",
                        ),
                        OptionSpec(
                            name="dall-e-3",
                            label="DALL-E 3",
                            description="High quality image generation",
                        ),
                        OptionSpec(
                            name="dall-e-2",
                            label="DALL-E 2",
                            description="Lower cost, supports more sizes",
                        ),
                    ),
                ),
                InputSpec(
                    label="Size",
                    name="size",
                    type=InputType.OPTIONS,
                    default="1024x1024",
                    options=(
                        OptionSpec(name="1024x1024", label="1024x1024 (Square)"),
                        OptionSpec(name="1536x1024", label="1536x1024 (Landscape)"),
                        OptionSpec(name="1024x1536", label="1024x1536 (Portrait)"),
                        OptionSpec(name="512x512", label="512x512 (DALL-E 2 only)"),
                        OptionSpec(name="256x256", label="256x256 (DALL-E 2 only)"),
                    ),
                    optional=True,
                ),
                InputSpec(
                    label="Quality",
                    name="quality",
                    type=InputType.OPTIONS,
                    default="medium",
                    options=(
                        OptionSpec(name="low", label="Low"),
                        OptionSpec(name="medium", label="Medium"),
                        OptionSpec(name="high", label="High"),
                        OptionSpec(name="standard", label="Standard (DALL-E 3)"),
                        OptionSpec(name="hd", label="HD (DALL-E 3)"),
                    ),
                    optional=True,
                ),
                InputSpec(
                    label="Tool Name",
                    name="toolName",
                    type=InputType.STRING,
                    default=DEFAULT_TOOL_NAME,
                    description="Name of the tool exposed to the agent",
                    optional=True,
                    additional_params=True,
                ),
                InputSpec(
                    label="Tool Description",
                    name="toolDescription",
                    type=InputType.STRING,
                    default=DEFAULT_TOOL_DESCRIPTION,
                    description="Description the agent uses to decide when to call the tool",
                    rows=3,
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
    ) -> StructuredTool:
        inputs = self.resolve_inputs(node_data)
        credential_data = await self.resolve_credential(node_data, context)
        api_key = require_credential_param(
            "openAIApiKey",
            credential_data,
            node_data,
            message="OpenAI API Key가 자격증명에 없습니다",
        )

        tool = StructuredTool.from_function(
            coroutine=build_image_generator(
                api_key,
                model=inputs["model"],
                size=inputs["size"],
                quality=inputs["quality"],
            ),
            name=inputs["toolName"],
            description=inputs["toolDescription"],
            args_schema=ImageGenerationInput,
        )

        self.log_init(
            node_data,
            flow_execution_id,
            f"OpenAI 이미지 생성 도구 초기화: model={inputs['model']}, api_key={mask_secret(api_key)}",
        )
        return tool
