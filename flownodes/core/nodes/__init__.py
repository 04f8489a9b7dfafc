"""
노드 패키지

노드 기술자, 초기화 프로토콜, 레지스트리를 포함합니다.
"""

from flownodes.core.nodes.base_node import BaseNode, NodeData
from flownodes.core.nodes.context import ExecutionContext
from flownodes.core.nodes.descriptor import (
    CapabilityDescriptor,
    CredentialSpec,
    InputSpec,
    InputType,
    OptionSpec,
)
from flownodes.core.nodes.node_registry import (
    NodeRegistry,
    node_registry,
    register_node,
    register_default_nodes,
)

__all__ = [
    "BaseNode",
    "NodeData",
    "ExecutionContext",
    "CapabilityDescriptor",
    "CredentialSpec",
    "InputSpec",
    "InputType",
    "OptionSpec",
    "NodeRegistry",
    "node_registry",
    "register_node",
    "register_default_nodes",
]
