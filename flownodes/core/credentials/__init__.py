"""
자격증명 해석 패키지
"""

from flownodes.core.credentials.resolver import (
    CredentialResolver,
    get_credential_data,
    get_credential_param,
    require_credential_param,
)
from flownodes.core.credentials.store import EncryptedCredentialStore

__all__ = [
    "CredentialResolver",
    "EncryptedCredentialStore",
    "get_credential_data",
    "get_credential_param",
    "require_credential_param",
]
