"""
pytest 공통 픽스처 및 설정
"""
import os

import pytest
from cryptography.fernet import Fernet

# settings 로드 전에 테스트용 키 설정
os.environ.setdefault("CREDENTIAL_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("USE_STRUCTURED_LOGGING", "false")

from flownodes.core.credentials.store import EncryptedCredentialStore  # noqa: E402
from flownodes.core.nodes.base_node import NodeData  # noqa: E402
from flownodes.core.nodes.context import ExecutionContext  # noqa: E402
from flownodes.core.nodes.node_registry import node_registry  # noqa: E402

ANTHROPIC_TEST_KEY = "sk-ant-REDACTED"
OPENAI_TEST_KEY = "sk-test-0123456789abcdef"


@pytest.fixture
def credential_store():
    """테스트용 자격증명 저장소"""
    return EncryptedCredentialStore(encryption_key=Fernet.generate_key().decode())


@pytest.fixture
def anthropic_credential(credential_store):
    """Anthropic 자격증명 참조"""
    return credential_store.save("anthropicApi", {"anthropicApiKey": ANTHROPIC_TEST_KEY})


@pytest.fixture
def openai_credential(credential_store):
    """OpenAI 자격증명 참조"""
    return credential_store.save("openAIApi", {"openAIApiKey": OPENAI_TEST_KEY})


@pytest.fixture
def execution_context(credential_store):
    """자격증명 해석기가 등록된 실행 컨텍스트"""
    return ExecutionContext(
        credential_resolver=credential_store,
        metadata={"chatflow_id": "flow-test"}
    )


@pytest.fixture
def make_node_data():
    """NodeData 생성 헬퍼"""
    def _make(inputs=None, credential=None, node_id="node-1"):
        return NodeData(id=node_id, inputs=inputs or {}, credential=credential)
    return _make


@pytest.fixture
def sample_messages():
    """테스트용 샘플 메시지"""
    return [
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "Hello!"}
    ]


@pytest.fixture
def clean_registry():
    """테스트마다 비어 있는 노드 레지스트리"""
    node_registry.clear()
    yield node_registry
    node_registry.clear()
