"""
커스텀 예외 클래스 정의

노드 초기화와 Provider 호출 전반에서 사용할 예외 타입들을 정의합니다.
"""
from typing import Optional, Dict, Any


class BaseAppException(Exception):
    """애플리케이션 기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# 노드 초기화 관련 예외 (init에서 동기적으로 발생, 호출 단위로 치명적)
# ============================================================================

class NodeError(BaseAppException):
    """노드 관련 기본 예외"""
    pass


class ConfigurationError(NodeError):
    """필수 입력 누락 또는 잘못된 입력값"""
    def __init__(self, message: str = "노드 설정이 올바르지 않습니다", **kwargs):
        super().__init__(message, error_code="NODE_CONFIGURATION_ERROR", **kwargs)


class CredentialError(NodeError):
    """자격증명 누락, 해석 실패 또는 필수 필드 누락"""
    def __init__(
        self,
        message: str = "자격증명을 확인할 수 없습니다",
        error_code: str = "CREDENTIAL_ERROR",
        **kwargs
    ):
        super().__init__(message, error_code=error_code, **kwargs)


class CredentialNotFoundError(CredentialError):
    """자격증명 참조가 없거나 유효하지 않음"""
    def __init__(self, message: str = "자격증명을 찾을 수 없습니다", **kwargs):
        super().__init__(message, error_code="CREDENTIAL_NOT_FOUND", **kwargs)


class CredentialStoreUnavailableError(CredentialError):
    """자격증명 저장소에 접근할 수 없음"""
    def __init__(self, message: str = "자격증명 저장소에 접근할 수 없습니다", **kwargs):
        super().__init__(message, error_code="CREDENTIAL_STORE_UNAVAILABLE", **kwargs)


# ============================================================================
# Provider 호출 관련 예외
# ============================================================================

class ProviderServiceError(BaseAppException):
    """외부 Provider 관련 기본 예외"""
    pass


class ProviderError(ProviderServiceError):
    """Provider가 비즈니스 수준의 오류를 보고함"""
    def __init__(
        self,
        message: str = "Provider가 오류를 반환했습니다",
        error_code: str = "PROVIDER_ERROR",
        **kwargs
    ):
        super().__init__(message, error_code=error_code, **kwargs)


class ProviderRateLimitError(ProviderError):
    """Provider 사용량 제한"""
    def __init__(self, message: str = "Provider 사용량 제한에 도달했습니다", **kwargs):
        super().__init__(message, error_code="PROVIDER_RATE_LIMIT_ERROR", **kwargs)


class TransportError(ProviderServiceError):
    """Provider에 도달하지 못함 (네트워크/타임아웃)"""
    def __init__(self, message: str = "Provider 요청 전송에 실패했습니다", **kwargs):
        super().__init__(message, error_code="TRANSPORT_ERROR", **kwargs)


# ============================================================================
# 조회 관련 예외
# ============================================================================

class ResourceNotFoundError(BaseAppException):
    """리소스를 찾을 수 없음"""
    def __init__(self, message: str = "요청한 리소스를 찾을 수 없습니다", **kwargs):
        super().__init__(message, error_code="RESOURCE_NOT_FOUND", **kwargs)
