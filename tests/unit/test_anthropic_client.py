"""
AnthropicClient 유닛 테스트
"""
import httpx
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import anthropic

from flownodes.core.exceptions import ProviderError, ProviderRateLimitError, TransportError
from flownodes.core.providers.anthropic import AnthropicClient
from flownodes.core.providers.config import AnthropicConfig

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


@pytest.fixture
def anthropic_client():
    """테스트용 AnthropicClient 인스턴스"""
    return AnthropicClient(AnthropicConfig(
        api_key="sk-ant-test-key",
        model="claude-3-haiku-20240307",
        temperature=0.7,
        max_tokens=1000,
    ))


@pytest.fixture
def text_response():
    return SimpleNamespace(
        content=[SimpleNamespace(type="text", text="FastAPI is a modern Python web framework.")],
        usage=SimpleNamespace(input_tokens=12, output_tokens=8),
    )


def _status_response(status_code: int) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", ANTHROPIC_URL))


class TestInvocationParams:
    """invocation_params 테스트"""

    def test_unset_sampling_params_are_sentinel(self, anthropic_client):
        params = anthropic_client.invocation_params()

        assert params["top_p"] == -1
        assert params["top_k"] == -1
        assert params["model"] == "claude-3-haiku-20240307"
        assert params["max_tokens"] == 1000
        assert params["temperature"] == 0.7

    def test_call_options_override_config(self, anthropic_client):
        params = anthropic_client.invocation_params({"model": "claude-3-5-haiku-latest", "top_k": 5})

        assert params["model"] == "claude-3-5-haiku-latest"
        assert params["top_k"] == 5

    def test_extended_thinking(self):
        client = AnthropicClient(AnthropicConfig(
            api_key="sk-ant-test-key",
            temperature=0.5,
            thinking_budget_tokens=1024,
        ))

        params = client.invocation_params()

        assert params["thinking"] == {"type": "enabled", "budget_tokens": 1024}
        assert "temperature" not in params

    def test_none_values_dropped(self):
        client = AnthropicClient(AnthropicConfig(api_key="sk-ant-test-key"))
        params = client.invocation_params()

        assert "temperature" not in params
        assert "stop_sequences" not in params


class TestConvertMessages:
    """메시지 변환 테스트"""

    def test_system_message_is_split(self, anthropic_client, sample_messages):
        system_msg, converted = anthropic_client._convert_messages(sample_messages)

        assert system_msg == "You are a helpful assistant."
        assert converted == [{"role": "user", "content": "Hello!"}]

    def test_without_system_message(self, anthropic_client):
        system_msg, converted = anthropic_client._convert_messages([{"role": "user", "content": "Hi"}])

        assert system_msg is None
        assert len(converted) == 1


class TestGenerate:
    """generate 테스트"""

    @pytest.mark.asyncio
    async def test_generate_success(self, anthropic_client, sample_messages, text_response):
        create = AsyncMock(return_value=text_response)

        with patch.object(anthropic_client.client.messages, "create", new=create):
            result = await anthropic_client.generate(sample_messages, params={"model": "claude-3-haiku-20240307", "max_tokens": 10})

        assert result == "FastAPI is a modern Python web framework."
        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "You are a helpful assistant."
        assert kwargs["messages"] == [{"role": "user", "content": "Hello!"}]
        assert kwargs["max_tokens"] == 10
        assert anthropic_client.last_usage["total_tokens"] == 20

    @pytest.mark.asyncio
    async def test_thinking_blocks_are_skipped(self, anthropic_client, sample_messages):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="thinking", thinking="hmm"),
                SimpleNamespace(type="text", text="answer"),
            ],
            usage=None,
        )

        with patch.object(anthropic_client.client.messages, "create", new=AsyncMock(return_value=response)):
            result = await anthropic_client.generate(sample_messages)

        assert result == "answer"
        assert anthropic_client.last_usage is None

    @pytest.mark.asyncio
    async def test_rate_limit(self, anthropic_client, sample_messages):
        error = anthropic.RateLimitError("slow down", response=_status_response(429), body=None)

        with patch.object(anthropic_client.client.messages, "create", new=AsyncMock(side_effect=error)):
            with pytest.raises(ProviderRateLimitError):
                await anthropic_client.generate(sample_messages)

    @pytest.mark.asyncio
    async def test_provider_error(self, anthropic_client, sample_messages):
        error = anthropic.BadRequestError("bad request", response=_status_response(400), body=None)

        with patch.object(anthropic_client.client.messages, "create", new=AsyncMock(side_effect=error)):
            with pytest.raises(ProviderError) as exc_info:
                await anthropic_client.generate(sample_messages)

        assert not isinstance(exc_info.value, ProviderRateLimitError)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, anthropic_client, sample_messages):
        error = anthropic.APITimeoutError(request=httpx.Request("POST", ANTHROPIC_URL))

        with patch.object(anthropic_client.client.messages, "create", new=AsyncMock(side_effect=error)):
            with pytest.raises(TransportError):
                await anthropic_client.generate(sample_messages)
