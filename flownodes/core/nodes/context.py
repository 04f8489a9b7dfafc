"""
노드 실행 컨텍스트

호스트가 init 호출마다 전달하는 서비스 묶음입니다.
노드는 이 컨텍스트를 통해 자격증명 해석기 등 호스트 서비스를 주입받으며,
호출이 끝난 뒤 컨텍스트를 보관하지 않습니다.
"""

from typing import Any, Callable, Dict, Optional
import logging

from flownodes.core.credentials.resolver import CredentialResolver

logger = logging.getLogger(__name__)

CREDENTIAL_RESOLVER = "credential_resolver"


class ExecutionContext:
    """
    실행 컨텍스트

    Example:
        >>> context = ExecutionContext(credential_resolver=store)
        >>> context.register("chatflow_id", "flow-1")
        >>> resolver = context.get_credential_resolver()
    """

    def __init__(
        self,
        credential_resolver: Optional[CredentialResolver] = None,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        실행 컨텍스트 초기화

        Args:
            credential_resolver: 자격증명 해석기
            metadata: 호스트 메타데이터 (chatflow id 등)
        """
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self.metadata = metadata or {}

        if credential_resolver is not None:
            self.register(CREDENTIAL_RESOLVER, credential_resolver)

    # ========== 서비스 등록 ==========

    def register(self, name: str, service: Any) -> None:
        """
        서비스 인스턴스를 등록

        Args:
            name: 서비스 이름
            service: 서비스 인스턴스
        """
        self._services[name] = service
        logger.debug(f"Registered service: {name}")

    def register_factory(self, name: str, factory: Callable[[], Any]) -> None:
        """
        서비스 팩토리 함수를 등록 (조회할 때마다 새로 생성)

        Args:
            name: 서비스 이름
            factory: 서비스를 생성하는 팩토리 함수
        """
        self._factories[name] = factory
        logger.debug(f"Registered factory: {name}")

    # ========== 서비스 조회 ==========

    def get(self, name: str) -> Optional[Any]:
        """
        서비스 조회

        Args:
            name: 서비스 이름

        Returns:
            서비스 인스턴스 또는 None
        """
        if name in self._services:
            return self._services[name]

        if name in self._factories:
            return self._factories[name]()

        logger.debug(f"Service not found: {name}")
        return None

    def get_required(self, name: str) -> Any:
        """
        필수 서비스 조회 (없으면 예외 발생)

        Raises:
            ValueError: 서비스를 찾을 수 없을 때
        """
        service = self.get(name)
        if service is None:
            raise ValueError(f"Required service not found: {name}")
        return service

    def has(self, name: str) -> bool:
        """서비스 존재 여부 확인"""
        return name in self._services or name in self._factories

    def get_credential_resolver(self) -> Optional[CredentialResolver]:
        """자격증명 해석기 조회"""
        return self.get(CREDENTIAL_RESOLVER)

    def list_services(self) -> list[str]:
        """등록된 모든 서비스 이름 목록"""
        return sorted(set(self._services) | set(self._factories))

    def __repr__(self) -> str:
        return f"ExecutionContext(services={self.list_services()})"
