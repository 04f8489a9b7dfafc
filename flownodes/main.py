"""
flownodes - 노드 기술자 API 애플리케이션
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from flownodes.config import settings
from flownodes.api.v1.endpoints import nodes
from flownodes.core.exceptions import BaseAppException
from flownodes.api.exception_handlers import (
    base_app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    unhandled_exception_handler
)
from flownodes.core.logging_config import setup_logging, get_logger
from flownodes.core.nodes.node_registry import node_registry, register_default_nodes

setup_logging(
    log_level=settings.log_level,
    use_structured=settings.use_structured_logging
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 시작/종료"""
    logger.info(f"{settings.app_name} v{settings.app_version} 시작")
    logger.info(f"환경: {settings.environment}, 디버그 모드: {settings.debug}")

    register_default_nodes()
    logger.info(f"노드 등록 완료: {', '.join(node_registry.list_names())}")

    yield

    logger.info(f"{settings.app_name} 종료")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI 워크플로우 빌더용 노드 레지스트리 API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# 글로벌 예외 핸들러 등록
app.add_exception_handler(BaseAppException, base_app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(nodes.router, prefix="/api/v1/nodes", tags=["노드"])


@app.get("/health")
async def health_check():
    """헬스 체크 엔드포인트"""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "nodes": len(node_registry)
    }
