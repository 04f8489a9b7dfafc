"""
비전(이미지 입력) 전환 확장

일부 채팅 모델 노드는 텍스트 전용 모델과 이미지 입력이 가능한 모델 사이를
전환할 수 있습니다. 전환 상태는 text-mode / vision-mode 두 상태를 갖는
작은 상태 기계(VisionState)로 관리합니다.

동일 객체에 대한 동시 전환 호출은 호스트가 직렬화해야 합니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class VisionMode(str, Enum):
    """비전 전환 상태"""
    TEXT = "text-mode"
    VISION = "vision-mode"


class MultiModalOption(BaseModel):
    """이미지/오디오 입력 처리 옵션 (예: {"image": {"allowImageUploads": true}})"""
    model_config = ConfigDict(extra="allow")

    image: Optional[Dict[str, Any]] = Field(None, description="이미지 입력 옵션")
    audio: Optional[Dict[str, Any]] = Field(None, description="오디오 입력 옵션")

    @property
    def allow_image_uploads(self) -> bool:
        return bool((self.image or {}).get("allowImageUploads"))


@runtime_checkable
class VisionChatModel(Protocol):
    """호스트가 비전 전환을 요청할 수 있는 채팅 모델"""

    def set_vision_model(self) -> None:
        ...

    def revert_to_original_model(self) -> None:
        ...

    def set_multi_modal_option(self, option: MultiModalOption) -> None:
        ...


@dataclass
class VisionState:
    """
    비전 전환 상태 기계

    configured_* 값은 생성 시점에 고정되며 revert는 항상 이 값으로 복원합니다.
    """
    configured_model: str
    configured_max_tokens: Optional[int]
    model_name: str
    max_tokens: Optional[int]
    multi_modal_option: Optional[MultiModalOption] = None
    mode: VisionMode = VisionMode.TEXT

    @classmethod
    def capture(cls, model_name: str, max_tokens: Optional[int]) -> "VisionState":
        """생성 시점 값으로 초기 상태(text-mode) 생성"""
        return cls(
            configured_model=model_name,
            configured_max_tokens=max_tokens,
            model_name=model_name,
            max_tokens=max_tokens,
        )

    def enter_vision(
        self,
        vision_model: str,
        fallback_max_tokens: int,
        vision_prefixes: Tuple[str, ...]
    ) -> bool:
        """
        text-mode → vision-mode

        현재 모델이 이미 비전 모델 계열이면 모델/토큰 값은 그대로 둡니다.

        Returns:
            모델이 실제로 교체되었는지 여부
        """
        self.mode = VisionMode.VISION
        if self.model_name.startswith(vision_prefixes):
            return False
        self.model_name = vision_model
        self.max_tokens = self.configured_max_tokens or fallback_max_tokens
        return True

    def revert(self) -> None:
        """vision-mode → text-mode (생성 시점 값으로 무조건 복원)"""
        self.model_name = self.configured_model
        self.max_tokens = self.configured_max_tokens
        self.mode = VisionMode.TEXT


class VisionChatModelMixin:
    """
    VisionChatModel 프로토콜 구현

    하위 클래스는 DEFAULT_IMAGE_MODEL, DEFAULT_IMAGE_MAX_TOKEN,
    VISION_MODEL_PREFIXES를 정의하고 생성자에서 vision_state를 설정해야 합니다.
    """

    DEFAULT_IMAGE_MODEL: str
    DEFAULT_IMAGE_MAX_TOKEN: int
    VISION_MODEL_PREFIXES: Tuple[str, ...]

    vision_state: VisionState

    @property
    def configured_model(self) -> str:
        return self.vision_state.configured_model

    @property
    def configured_max_tokens(self) -> Optional[int]:
        return self.vision_state.configured_max_tokens

    @property
    def multi_modal_option(self) -> Optional[MultiModalOption]:
        return self.vision_state.multi_modal_option

    @property
    def vision_mode(self) -> VisionMode:
        return self.vision_state.mode

    @property
    def model_name(self) -> str:
        return self.vision_state.model_name

    @model_name.setter
    def model_name(self, value: str) -> None:
        self.vision_state.model_name = value

    @property
    def max_tokens(self) -> Optional[int]:
        return self.vision_state.max_tokens

    @max_tokens.setter
    def max_tokens(self, value: Optional[int]) -> None:
        self.vision_state.max_tokens = value

    def set_vision_model(self) -> None:
        self.vision_state.enter_vision(
            self.DEFAULT_IMAGE_MODEL,
            self.DEFAULT_IMAGE_MAX_TOKEN,
            self.VISION_MODEL_PREFIXES,
        )

    def revert_to_original_model(self) -> None:
        self.vision_state.revert()

    def set_multi_modal_option(self, option: MultiModalOption) -> None:
        self.vision_state.multi_modal_option = option
