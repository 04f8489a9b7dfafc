"""
LLM Provider 설정 스키마
"""
from typing import List, Optional
from pydantic import BaseModel, Field, SecretStr

# Anthropic 클라이언트가 "설정되지 않음"을 나타내는 값 (top_p, top_k)
UNSET_SAMPLING_PARAM = -1


class ProviderConfig(BaseModel):
    """Provider 설정 베이스 클래스"""

    api_key: SecretStr = Field(..., description="Provider API Key")
    base_url: Optional[str] = Field(default=None, description="API 엔드포인트 재정의")
    timeout: float = Field(default=60.0, gt=0, description="요청 타임아웃 (초)")
    connect_timeout: float = Field(default=10.0, gt=0, description="연결 타임아웃 (초)")
    max_retries: int = Field(default=2, ge=0, description="SDK 재시도 횟수")
    system_prompt: Optional[str] = Field(
        default=None,
        description="기본 시스템 프롬프트"
    )


class AnthropicConfig(ProviderConfig):
    """Anthropic Provider 설정"""

    model: str = Field(
        default="claude-3-haiku-20240307",
        description="모델 ID"
    )
    temperature: Optional[float] = Field(default=None, ge=0, le=1)
    max_tokens: int = Field(default=2048, gt=0, description="최대 생성 토큰")
    top_p: float = Field(default=UNSET_SAMPLING_PARAM, description="-1이면 설정하지 않음")
    top_k: int = Field(default=UNSET_SAMPLING_PARAM, description="-1이면 설정하지 않음")
    stop_sequences: Optional[List[str]] = None
    thinking_budget_tokens: Optional[int] = Field(
        default=None,
        ge=1024,
        description="extended thinking 토큰 예산 (None이면 비활성)"
    )


class OpenAIConfig(ProviderConfig):
    """OpenAI Provider 설정"""

    model: str = Field(
        default="gpt-4o-mini",
        description="모델 ID"
    )
    organization: Optional[str] = Field(
        default=None,
        description="OpenAI 조직 ID"
    )
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    top_p: Optional[float] = Field(default=None, ge=0, le=1)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2, le=2)
    presence_penalty: Optional[float] = Field(default=None, ge=-2, le=2)
    stop: Optional[List[str]] = None
