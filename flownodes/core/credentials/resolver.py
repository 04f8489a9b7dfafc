"""
자격증명 해석기 인터페이스

노드는 실행 컨텍스트에 등록된 CredentialResolver를 통해서만
복호화된 자격증명 데이터를 얻습니다.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TYPE_CHECKING
import logging

from flownodes.core.exceptions import (
    CredentialError,
    CredentialNotFoundError,
    CredentialStoreUnavailableError,
)

if TYPE_CHECKING:
    from flownodes.core.nodes.context import ExecutionContext
    from flownodes.core.nodes.base_node import NodeData

logger = logging.getLogger(__name__)


class CredentialResolver(ABC):
    """자격증명 해석기 추상 베이스 클래스"""

    @abstractmethod
    async def resolve(
        self,
        credential_ref: str,
        context: Optional["ExecutionContext"] = None
    ) -> Dict[str, str]:
        """
        자격증명 참조를 복호화된 데이터로 변환

        Args:
            credential_ref: 호스트가 저장한 불투명한 자격증명 ID
            context: 실행 컨텍스트

        Returns:
            {필드 이름: 비밀값} 딕셔너리

        Raises:
            CredentialNotFoundError: 참조가 없거나 유효하지 않은 경우
            CredentialStoreUnavailableError: 저장소에 접근할 수 없는 경우
        """
        pass


async def get_credential_data(
    credential_ref: Optional[str],
    context: "ExecutionContext"
) -> Dict[str, str]:
    """
    실행 컨텍스트의 해석기를 사용해 자격증명 데이터 조회

    Args:
        credential_ref: 자격증명 참조
        context: 실행 컨텍스트

    Returns:
        복호화된 자격증명 데이터

    Raises:
        CredentialError: 참조가 비어 있거나 해석에 실패한 경우
    """
    if not credential_ref:
        raise CredentialNotFoundError(
            message="자격증명이 설정되지 않았습니다",
            details={"credential": None}
        )

    resolver = context.get_credential_resolver()
    if resolver is None:
        raise CredentialStoreUnavailableError(
            message="실행 컨텍스트에 자격증명 해석기가 등록되지 않았습니다"
        )

    try:
        data = await resolver.resolve(credential_ref, context)
    except CredentialError:
        raise
    except Exception as e:
        logger.error(f"Credential resolution failed for {credential_ref}: {type(e).__name__}")
        raise CredentialStoreUnavailableError(
            details={"credential": credential_ref, "error_type": type(e).__name__}
        ) from e

    return dict(data or {})


def get_credential_param(
    param_name: str,
    credential_data: Dict[str, Any],
    node_data: Optional["NodeData"] = None
) -> Optional[Any]:
    """
    자격증명 필드 조회 (노드 입력값이 있으면 우선 사용)

    Args:
        param_name: 필드 이름 (예: "openAIApiKey")
        credential_data: 복호화된 자격증명 데이터
        node_data: 노드 입력 데이터

    Returns:
        필드 값 또는 None
    """
    if node_data is not None:
        override = node_data.inputs.get(param_name)
        if override:
            return override
    value = credential_data.get(param_name)
    return value if value else None


def require_credential_param(
    param_name: str,
    credential_data: Dict[str, Any],
    node_data: Optional["NodeData"] = None,
    message: Optional[str] = None
) -> Any:
    """
    필수 자격증명 필드 조회 (없으면 CredentialError)

    Raises:
        CredentialError: 필드가 없는 경우
    """
    value = get_credential_param(param_name, credential_data, node_data)
    if not value:
        raise CredentialError(
            message=message or f"'{param_name}' 자격증명 값이 필요합니다",
            details={"missing_field": param_name}
        )
    return value
