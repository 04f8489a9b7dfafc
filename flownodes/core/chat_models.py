"""
채팅 모델 능력 객체 베이스 클래스

채팅 모델 노드가 호스트에 돌려주는 객체의 공통 인터페이스입니다.
클래스 이름은 노드 기술자의 base_classes 라벨로도 사용됩니다.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseLanguageModel(ABC):
    """언어 모델 공통 인터페이스"""

    @abstractmethod
    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """호출 옵션을 반영한 요청 파라미터"""
        pass


class BaseChatModel(BaseLanguageModel):
    """메시지 목록을 받아 응답 텍스트를 돌려주는 채팅 모델"""

    @abstractmethod
    async def invoke(self, messages: List[Dict[str, Any]], **options) -> str:
        """
        채팅 완료 호출

        Raises:
            ProviderError: Provider가 오류를 반환한 경우
            TransportError: Provider에 도달하지 못한 경우
        """
        pass
