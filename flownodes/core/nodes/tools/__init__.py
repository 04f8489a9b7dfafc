"""
도구 노드 패키지
"""

from flownodes.core.nodes.tools.openai_image_gen import OpenAIImageGenNode

__all__ = ["OpenAIImageGenNode"]
