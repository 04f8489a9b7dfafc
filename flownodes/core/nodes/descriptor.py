"""
노드 능력 기술자(Capability Descriptor) 스키마

호스트가 설정 UI를 그리고 노드를 분류/필터링할 때 읽는 정적 메타데이터입니다.
모든 모델은 불변(frozen)이며, 노드 등록 시 한 번 생성된 뒤 변경되지 않습니다.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class InputType(str, Enum):
    """입력 타입"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OPTIONS = "options"
    CREDENTIAL = "credential"
    JSON = "json"
    PASSWORD = "password"


class DescriptorModel(BaseModel):
    """기술자 모델 공통 설정 (불변, 호스트용 camelCase 별칭)"""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class OptionSpec(DescriptorModel):
    """options 타입 입력의 선택지"""
    name: str = Field(..., description="선택지 값")
    label: str = Field(..., description="UI 표시명")
    description: Optional[str] = Field(None, description="선택지 설명")


class InputSpec(DescriptorModel):
    """노드 입력 정의"""
    label: str = Field(..., description="UI 표시명")
    name: str = Field(..., description="입력 이름")
    type: InputType = Field(..., description="입력 타입")
    default: Optional[Any] = Field(None, description="기본값")
    optional: bool = Field(False, description="선택 입력 여부")
    additional_params: bool = Field(False, description="고급 설정 (UI에서 기본 숨김)")
    options: Tuple[OptionSpec, ...] = Field(default_factory=tuple, description="선택지 목록")
    description: Optional[str] = Field(None, description="입력 설명")
    rows: Optional[int] = Field(None, description="텍스트 입력 줄 수")
    step: Optional[float] = Field(None, description="숫자 입력 단위")
    placeholder: Optional[str] = Field(None, description="입력 예시")

    @model_validator(mode="after")
    def _check_options(self) -> "InputSpec":
        if self.type == InputType.OPTIONS:
            if not self.options:
                raise ValueError(f"options input '{self.name}' must declare at least one option")
            if self.default is not None and self.default not in self.option_names():
                raise ValueError(
                    f"default '{self.default}' of input '{self.name}' is not one of its options"
                )
        return self

    def option_names(self) -> Tuple[str, ...]:
        """선택지 값 목록"""
        return tuple(option.name for option in self.options)


class CredentialSpec(DescriptorModel):
    """노드가 요구하는 자격증명 정의"""
    label: str = Field("Connect Credential", description="UI 표시명")
    name: str = Field("credential", description="입력 이름")
    type: Literal["credential"] = "credential"
    credential_names: Tuple[str, ...] = Field(..., min_length=1, description="허용되는 자격증명 타입")
    optional: bool = False


class CapabilityDescriptor(DescriptorModel):
    """
    노드 능력 기술자

    base_classes는 노드가 만들어내는 객체가 만족하는 추상 능력 라벨 목록이며,
    호스트는 타입 검사 대신 이 라벨의 포함 여부로 노드를 라우팅합니다.
    """
    label: str = Field(..., description="노드 라벨")
    name: str = Field(..., description="노드 이름 (레지스트리 키)")
    version: float = Field(1.0, description="노드 버전")
    type: str = Field(..., description="노드 타입 이름")
    icon: str = Field(..., description="아이콘 참조")
    category: str = Field(..., description="노드 카테고리 (예: Tools, Chat Models)")
    description: str = Field("", description="노드 설명")
    base_classes: Tuple[str, ...] = Field(..., min_length=1, description="만족하는 능력 라벨")
    inputs: Tuple[InputSpec, ...] = Field(default_factory=tuple, description="입력 목록")
    credential: Optional[CredentialSpec] = Field(None, description="자격증명 요구사항")

    @model_validator(mode="after")
    def _check_consistency(self) -> "CapabilityDescriptor":
        if self.type not in self.base_classes:
            raise ValueError(f"base_classes of '{self.name}' must include its own type '{self.type}'")
        names = [spec.name for spec in self.inputs]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"duplicate input names in '{self.name}': {sorted(duplicates)}")
        return self

    def satisfies(self, base_class: str) -> bool:
        """능력 라벨 포함 여부"""
        return base_class in frozenset(self.base_classes)

    def get_input(self, name: str) -> Optional[InputSpec]:
        """이름으로 입력 정의 조회"""
        for spec in self.inputs:
            if spec.name == name:
                return spec
        return None

    def primary_inputs(self) -> List[InputSpec]:
        """기본 입력 목록"""
        return [spec for spec in self.inputs if not spec.additional_params]

    def additional_inputs(self) -> List[InputSpec]:
        """고급(추가) 입력 목록"""
        return [spec for spec in self.inputs if spec.additional_params]

    def to_host_dict(self) -> Dict[str, Any]:
        """호스트 UI용 camelCase 딕셔너리"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
