"""
NodeRegistry 유닛 테스트
"""
import pytest

from flownodes.core.nodes.node_registry import NodeRegistry, register_default_nodes
from flownodes.core.nodes.chatmodels.chat_anthropic import ChatAnthropicNode
from flownodes.core.nodes.chatmodels.chat_openai import ChatOpenAINode
from flownodes.core.nodes.tools.openai_image_gen import OpenAIImageGenNode


class NotANode:
    pass


class TestNodeRegistry:
    """노드 등록/조회 테스트"""

    def test_singleton(self, clean_registry):
        assert NodeRegistry() is clean_registry

    def test_register_and_get(self, clean_registry):
        node = clean_registry.register(OpenAIImageGenNode)

        assert clean_registry.get("openAIImageGen") is node
        assert "openAIImageGen" in clean_registry
        assert clean_registry.is_registered("openAIImageGen")
        assert len(clean_registry) == 1

    def test_register_rejects_non_node(self, clean_registry):
        with pytest.raises(TypeError):
            clean_registry.register(NotANode)

    def test_register_duplicate(self, clean_registry):
        clean_registry.register(ChatOpenAINode)

        with pytest.raises(ValueError):
            clean_registry.register(ChatOpenAINode)

    def test_get_or_raise(self, clean_registry):
        with pytest.raises(KeyError):
            clean_registry.get_or_raise("missing")

    def test_unregister(self, clean_registry):
        clean_registry.register(ChatOpenAINode)
        clean_registry.unregister("chatOpenAI")

        assert clean_registry.get("chatOpenAI") is None
        assert clean_registry.get_descriptor("chatOpenAI") is None


class TestDescriptorFiltering:
    """기술자 필터링 테스트"""

    @pytest.fixture(autouse=True)
    def registered(self, clean_registry):
        register_default_nodes()
        return clean_registry

    def test_default_nodes(self, registered):
        assert sorted(registered.list_names()) == ["chatAnthropic", "chatOpenAI", "openAIImageGen"]

    def test_register_default_nodes_is_idempotent(self, registered):
        register_default_nodes()
        assert len(registered) == 3

    def test_filter_by_base_class(self, registered):
        assert registered.filter_by_base_class("Tool") == ["openAIImageGen"]
        assert sorted(registered.filter_by_base_class("BaseChatModel")) == ["chatAnthropic", "chatOpenAI"]
        assert registered.filter_by_base_class("ChatAnthropic") == ["chatAnthropic"]
        assert registered.filter_by_base_class("Nothing") == []

    def test_filter_by_category(self, registered):
        names = [d.name for d in registered.list_descriptors(category="Chat Models")]
        assert sorted(names) == ["chatAnthropic", "chatOpenAI"]

    def test_filter_by_category_and_base_class(self, registered):
        assert registered.list_descriptors(category="Tools", base_class="BaseChatModel") == []

    @pytest.mark.parametrize("node_class", [ChatAnthropicNode, ChatOpenAINode, OpenAIImageGenNode])
    def test_descriptors_rebuild_identically(self, registered, node_class):
        rebuilt = node_class().descriptor
        assert rebuilt == registered.get_descriptor(rebuilt.name)
        assert rebuilt.to_host_dict() == registered.get_descriptor(rebuilt.name).to_host_dict()

    @pytest.mark.asyncio
    async def test_init_unknown_node(self, registered, make_node_data, execution_context):
        with pytest.raises(KeyError):
            await registered.init_node("missing", make_node_data(), "exec-1", execution_context)
