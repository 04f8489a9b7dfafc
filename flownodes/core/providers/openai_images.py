"""
OpenAI Images API 클라이언트

텍스트 프롬프트로 이미지를 생성합니다 (POST /v1/images/generations).
"""

from __future__ import annotations

import asyncio
import httpx
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError

from flownodes.config import settings
from flownodes.core.exceptions import ProviderError, TransportError

logger = logging.getLogger(__name__)

# 엔드포인트 도달 실패로 취급하는 예외
TRANSPORT_EXCEPTIONS = (httpx.HTTPError, httpx.InvalidURL, OSError, asyncio.TimeoutError)


class ImageGenerationRequest(BaseModel):
    """이미지 생성 요청 모델"""
    model: str = Field(..., description="이미지 모델 ID")
    prompt: str = Field(..., description="생성할 이미지 설명")
    n: int = Field(default=1, ge=1, le=1)
    size: str = Field(default="1024x1024", pattern=r"^\d+x\d+$")
    quality: str = Field(default="medium")


class GeneratedImage(BaseModel):
    """생성된 이미지 한 건 (url 또는 b64_json 중 하나)"""
    url: Optional[str] = None
    b64_json: Optional[str] = None
    revised_prompt: Optional[str] = None


class ImageGenerationResponse(BaseModel):
    """이미지 생성 응답 모델"""
    created: Optional[int] = None
    data: List[GeneratedImage] = Field(default_factory=list)

    @property
    def first(self) -> Optional[GeneratedImage]:
        return self.data[0] if self.data else None


class OpenAIImageClient:
    """
    OpenAI Images API 클라이언트

    async with 블록 안에서만 사용합니다.
    """

    def __init__(
        self,
        api_key: str,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None
    ):
        """
        OpenAIImageClient 초기화

        Args:
            api_key: OpenAI API 키
            url: 이미지 생성 엔드포인트 (기본값: settings.openai_images_url)
        """
        self.api_key = api_key
        self.url = url or settings.openai_images_url
        self.timeout = httpx.Timeout(
            timeout or settings.provider_timeout,
            connect=connect_timeout or settings.provider_connect_timeout
        )
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            }
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()

    async def generate(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """
        이미지 생성

        Returns:
            ImageGenerationResponse: 응답 본문 (이미지가 없으면 data가 비어 있음)

        Raises:
            TransportError: 엔드포인트에 도달하지 못한 경우
            ProviderError: 응답 본문에 error가 있거나 JSON이 아닌 경우
        """
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        payload = request.model_dump()

        try:
            response = await self.client.post(self.url, json=payload)
        except TRANSPORT_EXCEPTIONS as e:
            logger.error(f"Image generation transport error: {type(e).__name__}: {e}")
            raise TransportError(
                message=str(e) or type(e).__name__,
                details={"error_type": type(e).__name__}
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Image generation returned non-JSON body: HTTP {response.status_code}")
            raise ProviderError(
                message=f"Invalid response from image service (HTTP {response.status_code})",
                details={"status_code": response.status_code}
            ) from e

        if not isinstance(body, dict):
            return ImageGenerationResponse()

        error = body.get("error")
        if error:
            raise ProviderError(
                message=self._error_message(error),
                details={"status_code": response.status_code}
            )

        try:
            return ImageGenerationResponse.model_validate(body)
        except ValidationError:
            logger.warning("Image generation response did not match the expected shape")
            return ImageGenerationResponse()

    @staticmethod
    def _error_message(error: Any) -> str:
        if isinstance(error, dict):
            return str(error.get("message") or error.get("code") or "Unknown error")
        return str(error)

    async def close(self):
        """클라이언트 종료"""
        if self.client:
            await self.client.aclose()
            self.client = None
