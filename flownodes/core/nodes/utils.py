"""
노드 공통 유틸리티
"""
from typing import Iterable, List

# 능력 라벨로 의미가 없는 언어/프레임워크 기반 클래스
_IGNORED_BASES = frozenset({"object", "ABC", "Generic", "BaseModel", "Protocol"})


def get_base_classes(cls: type) -> List[str]:
    """
    클래스 계층을 따라 능력 라벨로 쓸 기반 클래스 이름 수집

    Args:
        cls: 노드가 만들어내는 객체의 클래스

    Returns:
        MRO 순서의 클래스 이름 목록 (자기 자신 포함)

    Example:
        >>> get_base_classes(StructuredTool)
        ['StructuredTool', 'BaseTool', 'RunnableSerializable', 'Serializable', 'Runnable']
    """
    names: List[str] = []
    for klass in cls.__mro__:
        # 파라미터화된 제네릭 모델 이름(예: "Runnable[str, Any]")은 원형 이름으로 정규화
        name = klass.__name__.split("[", 1)[0]
        if name in _IGNORED_BASES or name.startswith("_") or name.endswith("Mixin"):
            continue
        if name not in names:
            names.append(name)
    return names


def merge_base_classes(*groups: Iterable[str]) -> List[str]:
    """순서를 유지하며 중복 라벨 제거"""
    merged: List[str] = []
    for group in groups:
        for name in group:
            if name not in merged:
                merged.append(name)
    return merged
