"""
ChatAnthropic 노드 / 모델 유닛 테스트
"""
import pytest
from unittest.mock import AsyncMock, patch

from flownodes.core.exceptions import ConfigurationError, CredentialError, CredentialNotFoundError
from flownodes.core.nodes.chatmodels.chat_anthropic import (
    ChatAnthropic,
    ChatAnthropicNode,
    drop_unset_params,
)
from flownodes.core.providers.anthropic import AnthropicClient
from flownodes.core.providers.config import AnthropicConfig
from flownodes.core.vision import MultiModalOption, VisionChatModel, VisionMode

ANTHROPIC_TEST_KEY = "sk-ant-REDACTED"


@pytest.fixture
def node():
    return ChatAnthropicNode()


@pytest.fixture
def chat_model():
    client = AnthropicClient(AnthropicConfig(api_key=ANTHROPIC_TEST_KEY, model="claude-2.1", max_tokens=512))
    return ChatAnthropic("node-1", client)


class TestDropUnsetParams:
    """-1 파라미터 제거 테스트"""

    def test_removes_only_sentinel(self):
        params = drop_unset_params({"top_p": -1, "top_k": -1, "temperature": -1, "model": "m"})
        assert params == {"temperature": -1, "model": "m"}

    def test_keeps_real_values(self):
        assert drop_unset_params({"top_p": 0.9, "top_k": 0}) == {"top_p": 0.9, "top_k": 0}


class TestChatAnthropicModel:
    """ChatAnthropic 테스트"""

    def test_invocation_params_strip_sentinel(self, chat_model):
        params = chat_model.invocation_params()

        assert "top_p" not in params
        assert "top_k" not in params
        assert params["model"] == "claude-2.1"
        assert params["max_tokens"] == 512

    def test_call_options_cannot_reintroduce_sentinel(self, chat_model):
        params = chat_model.invocation_params({"top_k": -1, "top_p": 0.8})

        assert "top_k" not in params
        assert params["top_p"] == 0.8

    def test_wraps_upstream_result(self, chat_model):
        upstream = {"model": "claude-2.1", "top_p": -1, "top_k": 3, "max_tokens": 10}

        with patch.object(chat_model.client, "invocation_params", return_value=upstream) as mocked:
            params = chat_model.invocation_params({"top_k": 3})

        assert params == {"model": "claude-2.1", "top_k": 3, "max_tokens": 10}
        assert mocked.call_args.args[0]["top_k"] == 3

    @pytest.mark.asyncio
    async def test_invoke_delegates_with_filtered_params(self, chat_model, sample_messages):
        generate = AsyncMock(return_value="hello")

        with patch.object(chat_model.client, "generate", new=generate):
            result = await chat_model.invoke(sample_messages, temperature=0.3)

        assert result == "hello"
        params = generate.call_args.kwargs["params"]
        assert params["temperature"] == 0.3
        assert "top_p" not in params and "top_k" not in params

    def test_default_max_tokens(self):
        model = ChatAnthropic("n", AnthropicClient(AnthropicConfig(api_key=ANTHROPIC_TEST_KEY)))
        assert model.configured_max_tokens == 2048

    def test_vision_toggle(self, chat_model):
        assert isinstance(chat_model, VisionChatModel)
        assert chat_model.vision_mode is VisionMode.TEXT

        chat_model.set_vision_model()
        assert chat_model.model_name == ChatAnthropic.DEFAULT_IMAGE_MODEL
        assert chat_model.max_tokens == 512
        assert chat_model.invocation_params()["model"] == "claude-3-5-haiku-latest"

        chat_model.revert_to_original_model()
        assert chat_model.model_name == "claude-2.1"
        assert chat_model.max_tokens == 512
        assert chat_model.vision_mode is VisionMode.TEXT

    def test_revert_after_option_and_repeated_vision(self, chat_model):
        constructed = (chat_model.model_name, chat_model.max_tokens)

        chat_model.set_vision_model()
        chat_model.set_multi_modal_option(MultiModalOption(image={"allowImageUploads": True}))
        chat_model.set_vision_model()
        chat_model.revert_to_original_model()

        assert (chat_model.model_name, chat_model.max_tokens) == constructed
        assert chat_model.vision_mode is VisionMode.TEXT
        assert chat_model.multi_modal_option.allow_image_uploads is True

    def test_vision_keeps_claude_3_model(self):
        model = ChatAnthropic("n", AnthropicClient(AnthropicConfig(
            api_key=ANTHROPIC_TEST_KEY, model="claude-3-7-sonnet-latest"
        )))

        model.set_vision_model()

        assert model.model_name == "claude-3-7-sonnet-latest"
        assert model.vision_mode is VisionMode.VISION

    def test_repr_has_no_secret(self, chat_model):
        assert ANTHROPIC_TEST_KEY not in repr(chat_model)
        assert "claude-2.1" in repr(chat_model)


class TestChatAnthropicNode:
    """ChatAnthropicNode 테스트"""

    def test_descriptor(self, node):
        descriptor = node.descriptor

        assert descriptor.name == "chatAnthropic"
        assert descriptor.category == "Chat Models"
        assert list(descriptor.base_classes) == ["ChatAnthropic", "BaseChatModel", "BaseLanguageModel"]
        assert descriptor.credential.credential_names == ("anthropicApi",)
        assert descriptor.get_input("modelName").default == "claude-3-haiku-20240307"
        assert descriptor.get_input("budgetTokens").additional_params is True

    @pytest.mark.asyncio
    async def test_init(self, node, make_node_data, anthropic_credential, execution_context):
        node_data = make_node_data(
            {"modelName": "claude-3-haiku-20240307", "allowImageUploads": True, "topP": "0.5"},
            credential=anthropic_credential,
        )

        model = await node.init(node_data, "exec-1", execution_context)

        assert isinstance(model, ChatAnthropic)
        assert model.id == "node-1"
        assert model.model_name == "claude-3-haiku-20240307"
        assert model.configured_max_tokens == 2048
        assert model.multi_modal_option.image == {"allowImageUploads": True}
        params = model.invocation_params()
        assert params["top_p"] == 0.5
        assert params["temperature"] == 0.9
        assert "top_k" not in params
        assert model.client.config.api_key.get_secret_value() == ANTHROPIC_TEST_KEY

    @pytest.mark.asyncio
    async def test_init_extended_thinking(self, node, make_node_data, anthropic_credential, execution_context):
        node_data = make_node_data(
            {"modelName": "claude-3-7-sonnet-latest", "extendedThinking": True, "budgetTokens": 2048},
            credential=anthropic_credential,
        )

        model = await node.init(node_data, "exec-1", execution_context)

        assert model.invocation_params()["thinking"] == {"type": "enabled", "budget_tokens": 2048}

    @pytest.mark.asyncio
    async def test_each_init_builds_new_object(self, node, make_node_data, anthropic_credential, execution_context):
        node_data = make_node_data({"modelName": "claude-3-haiku-20240307"}, credential=anthropic_credential)

        first = await node.init(node_data, "exec-1", execution_context)
        second = await node.init(node_data, "exec-1", execution_context)

        assert first is not second
        assert first.client is not second.client

    @pytest.mark.asyncio
    async def test_init_without_credential(self, node, make_node_data, execution_context):
        with pytest.raises(CredentialNotFoundError):
            await node.init(make_node_data({"modelName": "claude-3-haiku-20240307"}), "exec-1", execution_context)

    @pytest.mark.asyncio
    async def test_init_missing_api_key_field(self, node, make_node_data, credential_store, execution_context):
        ref = credential_store.save("anthropicApi", {"otherField": "x"})

        with pytest.raises(CredentialError) as exc_info:
            await node.init(make_node_data({"modelName": "claude-3-haiku-20240307"}, credential=ref), "exec-1", execution_context)

        assert exc_info.value.details["missing_field"] == "anthropicApiKey"

    @pytest.mark.asyncio
    async def test_init_invalid_model(self, node, make_node_data, anthropic_credential, execution_context):
        with pytest.raises(ConfigurationError):
            await node.init(make_node_data({"modelName": "gpt-4"}, credential=anthropic_credential), "exec-1", execution_context)

    @pytest.mark.asyncio
    async def test_init_out_of_range_temperature(self, node, make_node_data, anthropic_credential, execution_context):
        node_data = make_node_data(
            {"modelName": "claude-3-haiku-20240307", "temperature": 3},
            credential=anthropic_credential,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            await node.init(node_data, "exec-1", execution_context)

        assert "temperature" in exc_info.value.details["fields"]

    def test_top_k_is_integer_input(self, node):
        assert node.descriptor.get_input("topK").step == 1

    @pytest.mark.asyncio
    async def test_init_top_k(self, node, make_node_data, anthropic_credential, execution_context):
        node_data = make_node_data(
            {"modelName": "claude-3-haiku-20240307", "topK": "5"},
            credential=anthropic_credential,
        )

        model = await node.init(node_data, "exec-1", execution_context)

        assert model.invocation_params()["top_k"] == 5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("top_k", ["2.7", 2.7])
    async def test_init_fractional_top_k_rejected(self, node, make_node_data, anthropic_credential, execution_context, top_k):
        node_data = make_node_data(
            {"modelName": "claude-3-haiku-20240307", "topK": top_k},
            credential=anthropic_credential,
        )

        with pytest.raises(ConfigurationError) as exc_info:
            await node.init(node_data, "exec-1", execution_context)

        assert "top_k" in exc_info.value.details["fields"]
