"""
FastAPI 글로벌 예외 핸들러

커스텀 예외를 {error_code, message, details} 형태의 HTTP 응답으로 변환합니다.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from flownodes.core.exceptions import (
    BaseAppException,
    ConfigurationError,
    CredentialError,
    CredentialStoreUnavailableError,
    ProviderError,
    ProviderRateLimitError,
    TransportError,
    ResourceNotFoundError,
)

logger = logging.getLogger(__name__)


# 예외 타입별 HTTP 상태 코드 (하위 클래스는 MRO상 가장 가까운 타입을 따름)
EXCEPTION_STATUS_MAP = {
    ConfigurationError: status.HTTP_400_BAD_REQUEST,
    CredentialError: status.HTTP_401_UNAUTHORIZED,
    ResourceNotFoundError: status.HTTP_404_NOT_FOUND,
    ProviderRateLimitError: status.HTTP_429_TOO_MANY_REQUESTS,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
    CredentialStoreUnavailableError: status.HTTP_502_BAD_GATEWAY,
    TransportError: status.HTTP_504_GATEWAY_TIMEOUT,
}


def get_http_status_code(exception: BaseAppException) -> int:
    """예외에 대응하는 HTTP 상태 코드 (매핑이 없으면 500)"""
    for exception_type in type(exception).__mro__:
        if exception_type in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[exception_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_response(
    status_code: int,
    error_code: Optional[str],
    message: Any,
    details: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": error_code, "message": message, "details": details or {}}
    )


def _request_extra(request: Request, **extra: Any) -> Dict[str, Any]:
    return {"path": request.url.path, "method": request.method, **extra}


async def base_app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """BaseAppException 및 하위 클래스 처리"""
    status_code = get_http_status_code(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{type(exc).__name__}: {exc.message}",
        extra=_request_extra(request, error_code=exc.error_code, details=exc.details)
    )
    return _error_response(status_code, exc.error_code, exc.message, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 파라미터 검증 오류"""
    errors = [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed: {errors}", extra=_request_extra(request))
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "요청 데이터 검증에 실패했습니다",
        {"errors": errors}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """라우팅 단계의 HTTPException (예: 없는 경로)"""
    logger.info(f"HTTP {exc.status_code}: {exc.detail}", extra=_request_extra(request))
    return _error_response(exc.status_code, "HTTP_ERROR", exc.detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 예외"""
    logger.error(
        f"Unhandled exception: {exc}",
        extra=_request_extra(request, exception_type=type(exc).__name__),
        exc_info=True
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "예기치 않은 오류가 발생했습니다. 관리자에게 문의해주세요."
    )
