"""노드 기술자 조회 API 엔드포인트"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from flownodes.core.exceptions import ResourceNotFoundError
from flownodes.core.nodes.node_registry import node_registry

logger = logging.getLogger(__name__)

router = APIRouter()


class NodeListResponse(BaseModel):
    """노드 기술자 목록 응답"""
    total: int = Field(..., description="조회된 노드 수")
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="camelCase 기술자 목록")


@router.get(
    "",
    response_model=NodeListResponse,
    summary="노드 목록 조회",
    description="등록된 노드의 기술자를 카테고리/능력 라벨로 필터링해 조회합니다."
)
async def list_nodes(
    category: Optional[str] = Query(None, description="카테고리 필터 (예: Tools)"),
    base_class: Optional[str] = Query(None, description="능력 라벨 필터 (예: BaseChatModel)"),
):
    descriptors = node_registry.list_descriptors(category=category, base_class=base_class)
    return NodeListResponse(
        total=len(descriptors),
        nodes=[descriptor.to_host_dict() for descriptor in descriptors]
    )


@router.get(
    "/{name}",
    response_model=Dict[str, Any],
    summary="노드 기술자 조회"
)
async def get_node(name: str):
    descriptor = node_registry.get_descriptor(name)
    if descriptor is None:
        raise ResourceNotFoundError(
            message=f"노드 '{name}'을(를) 찾을 수 없습니다",
            details={"name": name}
        )
    return descriptor.to_host_dict()
