"""
BaseNode 입력/자격증명 해석 유닛 테스트
"""
import pytest
from pydantic import BaseModel, Field

from flownodes.core.exceptions import (
    ConfigurationError,
    CredentialNotFoundError,
    CredentialStoreUnavailableError,
)
from flownodes.core.nodes.base_node import BaseNode
from flownodes.core.nodes.context import ExecutionContext
from flownodes.core.nodes.descriptor import (
    CapabilityDescriptor,
    CredentialSpec,
    InputSpec,
    InputType,
    OptionSpec,
)


class EchoNode(BaseNode):
    """테스트용 노드: 해석된 입력과 자격증명을 그대로 돌려줌"""

    def describe(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            label="Echo",
            name="echo",
            type="Echo",
            icon="echo.svg",
            category="Tools",
            base_classes=("Echo", "Tool"),
            credential=CredentialSpec(credential_names=("echoApi",)),
            inputs=(
                InputSpec(
                    label="Mode",
                    name="mode",
                    type=InputType.OPTIONS,
                    default="fast",
                    options=(OptionSpec(name="fast", label="Fast"), OptionSpec(name="slow", label="Slow")),
                ),
                InputSpec(label="Temperature", name="temperature", type=InputType.NUMBER, default=0.5, optional=True),
                InputSpec(label="Verbose", name="verbose", type=InputType.BOOLEAN, default=False, optional=True),
                InputSpec(label="Extra", name="extra", type=InputType.JSON, optional=True),
                InputSpec(label="Title", name="title", type=InputType.STRING, optional=True),
            ),
        )

    async def init(self, node_data, flow_execution_id, context):
        inputs = self.resolve_inputs(node_data)
        credential_data = await self.resolve_credential(node_data, context)
        return inputs, credential_data


class NoCredentialNode(BaseNode):
    def describe(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(
            label="Plain",
            name="plain",
            type="Plain",
            icon="plain.svg",
            category="Tools",
            base_classes=("Plain",),
        )

    async def init(self, node_data, flow_execution_id, context):
        return await self.resolve_credential(node_data, context)


class RangeConfig(BaseModel):
    ratio: float = Field(..., ge=0, le=1)


@pytest.fixture
def node():
    return EchoNode()


class TestResolveInputs:
    """resolve_inputs 테스트"""

    def test_optional_inputs_use_defaults(self, node, make_node_data):
        inputs = node.resolve_inputs(make_node_data({"mode": "slow"}))

        assert inputs == {
            "mode": "slow",
            "temperature": 0.5,
            "verbose": False,
            "extra": None,
            "title": None,
        }

    def test_missing_required_input(self, node, make_node_data):
        with pytest.raises(ConfigurationError) as exc_info:
            node.resolve_inputs(make_node_data({"temperature": 0.1}))

        assert exc_info.value.details["input"] == "mode"
        assert exc_info.value.error_code == "NODE_CONFIGURATION_ERROR"

    def test_empty_string_counts_as_missing(self, node, make_node_data):
        with pytest.raises(ConfigurationError):
            node.resolve_inputs(make_node_data({"mode": "  "}))

    def test_invalid_option(self, node, make_node_data):
        with pytest.raises(ConfigurationError) as exc_info:
            node.resolve_inputs(make_node_data({"mode": "turbo"}))

        assert exc_info.value.details["allowed"] == ["fast", "slow"]

    @pytest.mark.parametrize("raw,expected", [("0.7", 0.7), ("3", 3), (2, 2), (0.25, 0.25)])
    def test_number_coercion(self, node, make_node_data, raw, expected):
        inputs = node.resolve_inputs(make_node_data({"mode": "fast", "temperature": raw}))
        assert inputs["temperature"] == expected

    @pytest.mark.parametrize("raw", ["hot", True])
    def test_invalid_number(self, node, make_node_data, raw):
        with pytest.raises(ConfigurationError):
            node.resolve_inputs(make_node_data({"mode": "fast", "temperature": raw}))

    @pytest.mark.parametrize("raw,expected", [("true", True), ("False", False), (True, True), ("1", True)])
    def test_boolean_coercion(self, node, make_node_data, raw, expected):
        inputs = node.resolve_inputs(make_node_data({"mode": "fast", "verbose": raw}))
        assert inputs["verbose"] is expected

    def test_json_input(self, node, make_node_data):
        inputs = node.resolve_inputs(make_node_data({"mode": "fast", "extra": '{"a": 1}'}))
        assert inputs["extra"] == {"a": 1}

    def test_invalid_json_input(self, node, make_node_data):
        with pytest.raises(ConfigurationError):
            node.resolve_inputs(make_node_data({"mode": "fast", "extra": "{not json"}))

    def test_string_input_is_stringified(self, node, make_node_data):
        inputs = node.resolve_inputs(make_node_data({"mode": "fast", "title": 42}))
        assert inputs["title"] == "42"


class TestResolveCredential:
    """resolve_credential 테스트"""

    @pytest.mark.asyncio
    async def test_resolves_through_context(self, node, make_node_data, credential_store, execution_context):
        ref = credential_store.save("echoApi", {"echoKey": "secret"})

        inputs, credential_data = await node.init(
            make_node_data({"mode": "fast"}, credential=ref), "exec-1", execution_context
        )

        assert credential_data == {"echoKey": "secret"}

    @pytest.mark.asyncio
    async def test_missing_reference(self, node, make_node_data, execution_context):
        with pytest.raises(CredentialNotFoundError) as exc_info:
            await node.init(make_node_data({"mode": "fast"}), "exec-1", execution_context)

        assert exc_info.value.details["credential_names"] == ["echoApi"]

    @pytest.mark.asyncio
    async def test_unknown_reference(self, node, make_node_data, execution_context):
        with pytest.raises(CredentialNotFoundError):
            await node.init(make_node_data({"mode": "fast"}, credential="nope"), "exec-1", execution_context)

    @pytest.mark.asyncio
    async def test_context_without_resolver(self, node, make_node_data):
        with pytest.raises(CredentialStoreUnavailableError):
            await node.init(make_node_data({"mode": "fast"}, credential="ref"), "exec-1", ExecutionContext())

    @pytest.mark.asyncio
    async def test_node_without_credential_spec(self, make_node_data):
        result = await NoCredentialNode().init(make_node_data(), "exec-1", ExecutionContext())
        assert result == {}


class TestDescriptorAccess:
    """기술자 접근 테스트"""

    def test_describe_is_deterministic(self, node):
        assert node.describe() == node.describe()
        assert node.descriptor == EchoNode().descriptor

    def test_name_and_label(self, node):
        assert node.name == "echo"
        assert node.label == "Echo"
        assert node.to_dict()["name"] == "echo"

    def test_build_config_wraps_validation_error(self, node):
        with pytest.raises(ConfigurationError) as exc_info:
            node.build_config(RangeConfig, ratio=3)

        assert exc_info.value.details["fields"] == ["ratio"]
        assert node.build_config(RangeConfig, ratio=0.5).ratio == 0.5
