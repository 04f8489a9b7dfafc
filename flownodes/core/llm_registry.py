"""
LLM Provider Registry
"""
from __future__ import annotations

from typing import Dict, Type, TYPE_CHECKING
import threading
import logging

if TYPE_CHECKING:
    from flownodes.core.llm_base import BaseLLMClient
    from flownodes.core.providers.config import ProviderConfig

logger = logging.getLogger(__name__)


class LLMProviderRegistry:
    """
    LLM Provider 클래스 등록/생성

    노드 초기화마다 독립된 클라이언트가 필요하므로 인스턴스를 캐시하지 않습니다.
    """

    _providers: Dict[str, Type["BaseLLMClient"]] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, provider_name: str, client_class: Type["BaseLLMClient"]) -> None:
        """Provider 클래스 등록"""
        provider_key = provider_name.lower()
        with cls._lock:
            if provider_key in cls._providers:
                logger.warning("Provider %s already registered, overriding", provider_key)
            cls._providers[provider_key] = client_class
        logger.info("Registered LLM provider '%s' -> %s", provider_key, client_class.__name__)

    @classmethod
    def create_client(cls, provider: str, *, config: "ProviderConfig") -> "BaseLLMClient":
        """
        Provider 이름으로 새 Client 인스턴스 생성

        Args:
            provider: provider 식별자
            config: 초기화에 사용할 설정 객체

        Raises:
            ValueError: 등록되지 않은 provider이거나 설정이 없는 경우
        """
        provider_key = (provider or "").lower()

        with cls._lock:
            client_class = cls._providers.get(provider_key)

        if client_class is None:
            raise ValueError(f"지원하지 않는 LLM 제공자: {provider}")
        if config is None:
            raise ValueError(f"{provider} Provider 초기화를 위한 설정이 필요합니다")

        return client_class(config=config)

    @classmethod
    def list_providers(cls) -> Dict[str, Type["BaseLLMClient"]]:
        """등록된 Provider 목록"""
        return dict(cls._providers)


def register_provider(provider_name: str):
    """Provider 자동 등록 데코레이터"""

    def decorator(cls: Type["BaseLLMClient"]):
        LLMProviderRegistry.register(provider_name, cls)
        return cls

    return decorator
