"""
LLM 클라이언트 베이스 클래스
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class BaseLLMClient(ABC):
    """LLM Provider 클라이언트 추상 베이스 클래스"""

    @abstractmethod
    def invocation_params(self, options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """설정과 호출 옵션을 합쳐 요청 파라미터 구성"""
        pass

    @abstractmethod
    async def generate(
        self,
        messages: List[Dict[str, Any]],
        params: Optional[Dict[str, Any]] = None,
        **options
    ) -> str:
        """
        LLM 응답 생성

        Args:
            messages: OpenAI 형식 메시지 목록
            params: 이미 구성된 요청 파라미터 (없으면 invocation_params(options) 사용)
        """
        pass

    async def aclose(self) -> None:
        """HTTP 연결 정리"""
        return None
