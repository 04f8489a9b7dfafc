"""
노드 레지스트리

노드 타입을 등록하고, 호스트가 기술자를 조회/필터링하도록 제공합니다.
노드 타입마다 하나의 노드 인스턴스(와 기술자)가 등록 시점에 생성됩니다.
"""

from typing import Any, Dict, List, Optional, Type
import logging

from flownodes.core.nodes.base_node import BaseNode, NodeData
from flownodes.core.nodes.context import ExecutionContext
from flownodes.core.nodes.descriptor import CapabilityDescriptor

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    노드 타입 레지스트리

    노드를 등록하고 기술자의 base_classes 라벨로 노드를 찾습니다.
    """

    _instance: Optional['NodeRegistry'] = None
    _nodes: Dict[str, BaseNode] = {}

    def __new__(cls) -> 'NodeRegistry':
        """싱글톤 인스턴스 생성"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._nodes = {}
        return cls._instance

    def register(self, node_class: Type[BaseNode]) -> BaseNode:
        """
        노드 타입 등록

        Args:
            node_class: BaseNode 하위 클래스

        Returns:
            등록된 노드 인스턴스

        Raises:
            TypeError: BaseNode를 상속하지 않은 경우
            ValueError: 같은 이름의 노드가 이미 등록된 경우
        """
        if not isinstance(node_class, type) or not issubclass(node_class, BaseNode):
            raise TypeError("Node class must inherit from BaseNode")

        node = node_class()
        if node.name in self._nodes:
            raise ValueError(f"Node {node.name} is already registered")

        self._nodes[node.name] = node
        logger.info(f"Registered node: {node.name} -> {node_class.__name__}")
        return node

    def unregister(self, name: str) -> None:
        """
        노드 등록 해제

        Args:
            name: 노드 이름
        """
        if name in self._nodes:
            del self._nodes[name]
            logger.info(f"Unregistered node: {name}")

    def get(self, name: str) -> Optional[BaseNode]:
        """
        노드 조회

        Args:
            name: 노드 이름

        Returns:
            노드 인스턴스 또는 None
        """
        return self._nodes.get(name)

    def get_or_raise(self, name: str) -> BaseNode:
        """
        노드 조회 (없으면 예외 발생)

        Raises:
            KeyError: 등록되지 않은 노드인 경우
        """
        if name not in self._nodes:
            raise KeyError(f"Node {name} is not registered")
        return self._nodes[name]

    def get_descriptor(self, name: str) -> Optional[CapabilityDescriptor]:
        """노드 기술자 조회"""
        node = self.get(name)
        return node.descriptor if node else None

    def list_names(self) -> List[str]:
        """등록된 모든 노드 이름"""
        return list(self._nodes.keys())

    def list_descriptors(
        self,
        category: Optional[str] = None,
        base_class: Optional[str] = None
    ) -> List[CapabilityDescriptor]:
        """
        기술자 목록 조회

        Args:
            category: 카테고리 필터 (예: "Tools")
            base_class: 능력 라벨 필터 (예: "Tool", "BaseChatModel")

        Returns:
            조건에 맞는 기술자 목록
        """
        descriptors = []
        for node in self._nodes.values():
            descriptor = node.descriptor
            if category and descriptor.category != category:
                continue
            if base_class and not descriptor.satisfies(base_class):
                continue
            descriptors.append(descriptor)
        return descriptors

    def filter_by_base_class(self, base_class: str) -> List[str]:
        """능력 라벨을 만족하는 노드 이름 목록"""
        return [d.name for d in self.list_descriptors(base_class=base_class)]

    async def init_node(
        self,
        name: str,
        node_data: NodeData,
        flow_execution_id: str,
        context: ExecutionContext
    ) -> Any:
        """
        이름으로 노드를 찾아 능력 객체 생성

        Raises:
            KeyError: 등록되지 않은 노드인 경우
        """
        node = self.get_or_raise(name)
        return await node.init(node_data, flow_execution_id, context)

    def clear(self) -> None:
        """모든 등록된 노드 제거"""
        self._nodes.clear()
        logger.info("Cleared all registered nodes")

    def is_registered(self, name: str) -> bool:
        return name in self._nodes

    def __contains__(self, name: str) -> bool:
        """in 연산자 지원"""
        return name in self._nodes

    def __len__(self) -> int:
        """등록된 노드 개수"""
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"NodeRegistry({', '.join(self._nodes.keys())})"


# 전역 레지스트리 인스턴스
node_registry = NodeRegistry()


def register_node(cls: Type[BaseNode]) -> Type[BaseNode]:
    """
    노드 클래스 데코레이터

    사용 예:
        @register_node
        class MyToolNode(BaseNode):
            ...
    """
    node_registry.register(cls)
    return cls


def register_default_nodes() -> None:
    """기본 노드들을 등록합니다 (이미 등록된 노드는 건너뜀)."""
    from flownodes.core.nodes.chatmodels.chat_anthropic import ChatAnthropicNode
    from flownodes.core.nodes.chatmodels.chat_openai import ChatOpenAINode
    from flownodes.core.nodes.tools.openai_image_gen import OpenAIImageGenNode

    for node_class in (ChatAnthropicNode, ChatOpenAINode, OpenAIImageGenNode):
        if node_class().name in node_registry:
            continue
        node_registry.register(node_class)

    logger.info(f"Node registry initialized with {len(node_registry)} node types")
