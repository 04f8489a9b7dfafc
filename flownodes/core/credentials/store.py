"""
암호화 자격증명 저장소

Fernet으로 암호화된 자격증명을 메모리에 보관하는 CredentialResolver 구현입니다.
로컬 실행과 테스트에서 호스트의 자격증명 저장소를 대신합니다.
"""
from __future__ import annotations

import base64
import json
import logging
import uuid
from typing import Dict, Optional, TYPE_CHECKING

from cryptography.fernet import Fernet, InvalidToken

from flownodes.config import settings
from flownodes.core.credentials.resolver import CredentialResolver
from flownodes.core.exceptions import (
    CredentialNotFoundError,
    CredentialStoreUnavailableError,
)

if TYPE_CHECKING:
    from flownodes.core.nodes.context import ExecutionContext

logger = logging.getLogger(__name__)


class EncryptedCredentialStore(CredentialResolver):
    """
    Fernet 암호화 자격증명 저장소

    Example:
        >>> store = EncryptedCredentialStore()
        >>> ref = store.save("openAIApi", {"openAIApiKey": "sk-..."})
        >>> data = await store.resolve(ref)
    """

    def __init__(self, encryption_key: Optional[str] = None):
        key = encryption_key or settings.credential_encryption_key
        if not key:
            key = Fernet.generate_key().decode()
            logger.warning("CREDENTIAL_ENCRYPTION_KEY가 없어 임시 키를 생성합니다")
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)
        self._records: Dict[str, Dict[str, str]] = {}

    def encrypt(self, data: Dict[str, str]) -> str:
        """자격증명 데이터 암호화"""
        encrypted = self._fernet.encrypt(json.dumps(data).encode())
        return base64.urlsafe_b64encode(encrypted).decode()

    def decrypt(self, encrypted_data: str) -> Dict[str, str]:
        """
        자격증명 데이터 복호화

        Raises:
            CredentialStoreUnavailableError: 복호화에 실패한 경우
        """
        try:
            decoded = base64.urlsafe_b64decode(encrypted_data.encode())
            return json.loads(self._fernet.decrypt(decoded).decode())
        except (InvalidToken, ValueError) as e:
            logger.error(f"Credential decryption failed: {type(e).__name__}")
            raise CredentialStoreUnavailableError(
                message="자격증명을 복호화할 수 없습니다"
            ) from e

    def save(
        self,
        credential_name: str,
        data: Dict[str, str],
        credential_id: Optional[str] = None
    ) -> str:
        """
        자격증명 저장

        Args:
            credential_name: 자격증명 타입 이름 (예: "openAIApi")
            data: 평문 자격증명 데이터
            credential_id: 지정할 ID (없으면 생성)

        Returns:
            자격증명 참조 ID
        """
        credential_id = credential_id or str(uuid.uuid4())
        self._records[credential_id] = {
            "credential_name": credential_name,
            "encrypted_data": self.encrypt(data),
        }
        logger.info(f"Saved credential {credential_id} ({credential_name})")
        return credential_id

    def delete(self, credential_id: str) -> bool:
        """자격증명 삭제"""
        return self._records.pop(credential_id, None) is not None

    def get_credential_name(self, credential_id: str) -> Optional[str]:
        """자격증명 타입 이름 조회"""
        record = self._records.get(credential_id)
        return record["credential_name"] if record else None

    async def resolve(
        self,
        credential_ref: str,
        context: Optional["ExecutionContext"] = None
    ) -> Dict[str, str]:
        record = self._records.get(credential_ref)
        if record is None:
            raise CredentialNotFoundError(
                details={"credential": credential_ref}
            )
        return self.decrypt(record["encrypted_data"])

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"EncryptedCredentialStore(credentials={len(self._records)})"
