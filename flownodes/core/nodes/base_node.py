"""
노드 기본 인터페이스

모든 노드는 이 클래스를 상속받아 기술자(describe)와
초기화 프로토콜(init)을 구현해야 합니다.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar
import logging

from pydantic import BaseModel, Field, ValidationError

from flownodes.core.credentials.resolver import get_credential_data
from flownodes.core.exceptions import ConfigurationError, CredentialNotFoundError
from flownodes.core.nodes.context import ExecutionContext
from flownodes.core.nodes.descriptor import CapabilityDescriptor, InputSpec, InputType

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class NodeData(BaseModel):
    """
    호스트가 init 호출마다 만들어 전달하는 노드 입력 데이터

    inputs는 해석되지 않은 사용자 입력값, credential은 불투명한 자격증명 참조입니다.
    """
    id: str = Field(..., description="노드 인스턴스 ID")
    label: Optional[str] = Field(None, description="노드 라벨")
    name: Optional[str] = Field(None, description="노드 이름")
    inputs: Dict[str, Any] = Field(default_factory=dict, description="입력 이름별 사용자 입력값")
    credential: Optional[str] = Field(None, description="자격증명 참조")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


class BaseNode(ABC):
    """
    노드 추상 클래스

    Example:
        >>> class MyToolNode(BaseNode):
        ...     def describe(self) -> CapabilityDescriptor:
        ...         return CapabilityDescriptor(label="My Tool", name="myTool", ...)
        ...
        ...     async def init(self, node_data, flow_execution_id, context):
        ...         inputs = self.resolve_inputs(node_data)
        ...         credential_data = await self.resolve_credential(node_data, context)
        ...         return build_tool(inputs, credential_data)
    """

    def __init__(self):
        self._descriptor = self.describe()
        logger.debug(f"Initialized node type: {self._descriptor.name}")

    # ========== 추상 메서드 (구현 필수) ==========

    @abstractmethod
    def describe(self) -> CapabilityDescriptor:
        """
        노드의 정적 기술자 생성

        부수효과 없이 항상 같은 기술자를 반환해야 합니다.
        """
        pass

    @abstractmethod
    async def init(
        self,
        node_data: NodeData,
        flow_execution_id: str,
        context: ExecutionContext
    ) -> Any:
        """
        해석된 입력과 실행 컨텍스트로 능력 객체(모델 또는 도구) 생성

        Args:
            node_data: 노드 입력 데이터
            flow_execution_id: 플로우 실행 ID
            context: 실행 컨텍스트

        Returns:
            바로 사용할 수 있는 능력 객체

        Raises:
            ConfigurationError: 필수 입력이 없거나 잘못된 경우
            CredentialError: 자격증명이 없거나 해석에 실패한 경우
        """
        pass

    # ========== 기술자 접근 ==========

    @property
    def descriptor(self) -> CapabilityDescriptor:
        """노드 기술자 (읽기 전용)"""
        return self._descriptor

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def label(self) -> str:
        return self._descriptor.label

    # ========== 입력 해석 ==========

    def resolve_inputs(self, node_data: NodeData) -> Dict[str, Any]:
        """
        기술자에 선언된 입력을 검증하고 타입을 맞춤

        누락된 선택 입력은 선언된 기본값으로 채웁니다.

        Args:
            node_data: 노드 입력 데이터

        Returns:
            {입력 이름: 해석된 값}

        Raises:
            ConfigurationError: 필수 입력 누락 또는 값 변환 실패
        """
        resolved: Dict[str, Any] = {}

        for spec in self._descriptor.inputs:
            value = node_data.inputs.get(spec.name)

            if _is_missing(value):
                if not spec.optional:
                    raise ConfigurationError(
                        message=f"필수 입력 '{spec.label}'({spec.name})이(가) 설정되지 않았습니다",
                        details={"node": self.name, "input": spec.name}
                    )
                resolved[spec.name] = spec.default
                continue

            resolved[spec.name] = self._coerce_input(spec, value)

        return resolved

    def _coerce_input(self, spec: InputSpec, value: Any) -> Any:
        """입력 타입에 맞춰 값 변환"""
        details = {"node": self.name, "input": spec.name}

        if spec.type == InputType.OPTIONS:
            if value not in spec.option_names():
                raise ConfigurationError(
                    message=f"입력 '{spec.name}'의 값 '{value}'은(는) 허용되지 않습니다",
                    details={**details, "allowed": list(spec.option_names())}
                )
            return value

        if spec.type == InputType.NUMBER:
            if isinstance(value, bool):
                raise ConfigurationError(message=f"입력 '{spec.name}'은(는) 숫자여야 합니다", details=details)
            if isinstance(value, (int, float)):
                return value
            try:
                return int(value)
            except (TypeError, ValueError):
                pass
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    message=f"입력 '{spec.name}'은(는) 숫자여야 합니다",
                    details=details
                )

        if spec.type == InputType.BOOLEAN:
            if isinstance(value, bool):
                return value
            normalized = str(value).strip().lower()
            if normalized in _TRUE_STRINGS:
                return True
            if normalized in _FALSE_STRINGS:
                return False
            raise ConfigurationError(message=f"입력 '{spec.name}'은(는) 불리언이어야 합니다", details=details)

        if spec.type == InputType.JSON:
            if isinstance(value, str):
                try:
                    return json.loads(value)
                except json.JSONDecodeError as e:
                    raise ConfigurationError(
                        message=f"입력 '{spec.name}'의 JSON 형식이 올바르지 않습니다",
                        details={**details, "error": str(e)}
                    )
            return value

        return str(value)

    # ========== 자격증명 해석 ==========

    async def resolve_credential(
        self,
        node_data: NodeData,
        context: ExecutionContext
    ) -> Dict[str, str]:
        """
        기술자에 자격증명이 선언된 경우 자격증명 데이터 해석

        Returns:
            복호화된 자격증명 데이터 (자격증명이 없는 노드는 빈 딕셔너리)

        Raises:
            CredentialError: 참조가 없거나 해석에 실패한 경우
        """
        spec = self._descriptor.credential
        if spec is None:
            return {}

        if not node_data.credential:
            raise CredentialNotFoundError(
                message=(
                    f"'{self.label}' 노드에 자격증명이 연결되지 않았습니다 "
                    f"(필요: {', '.join(spec.credential_names)})"
                ),
                details={"node": self.name, "credential_names": list(spec.credential_names)}
            )

        return await get_credential_data(node_data.credential, context)

    # ========== 유틸리티 ==========

    def build_config(self, config_class: Type[ConfigT], **values: Any) -> ConfigT:
        """
        해석된 입력으로 Provider 설정 생성

        Raises:
            ConfigurationError: 설정 값이 허용 범위를 벗어난 경우
        """
        try:
            return config_class(**values)
        except ValidationError as e:
            fields = [".".join(str(loc) for loc in err["loc"]) for err in e.errors()]
            raise ConfigurationError(
                message=f"'{self.label}' 노드 설정 값이 올바르지 않습니다: {', '.join(fields)}",
                details={"node": self.name, "fields": fields}
            ) from e

    def log_init(self, node_data: NodeData, flow_execution_id: str, message: str) -> None:
        """노드 초기화 로그 (구조화 포매터에서 박스로 표시)"""
        logger.info(
            message,
            extra={
                "log_type": "node_init",
                "node_name": self.name,
                "node_id": node_data.id,
                "flow_execution_id": flow_execution_id,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        """노드 기술자를 호스트용 딕셔너리로 변환"""
        return self._descriptor.to_host_dict()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, version={self._descriptor.version})"
