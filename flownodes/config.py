"""
애플리케이션 설정 관리
"""
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import Optional
import os


class Settings(BaseSettings):
    """애플리케이션 설정 클래스"""

    # 애플리케이션
    app_name: str = "flownodes"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "info"
    use_structured_logging: bool = True  # 구조화된 로깅 사용 여부
    environment: str = "development"  # development, staging, production

    # 자격증명 저장소 (Fernet 키, 비어 있으면 프로세스마다 새로 생성)
    credential_encryption_key: str = ""

    # Provider 공통 HTTP 설정
    provider_timeout: float = 60.0
    provider_connect_timeout: float = 10.0

    # Provider 엔드포인트
    openai_images_url: str = "https://api.openai.com/v1/images/generations"
    openai_base_url: Optional[str] = None
    anthropic_base_url: Optional[str] = None

    model_config = ConfigDict(
        # 로컬: .env.local (기본값)
        # 서버: ENV_FILE=.env.production 환경 변수 설정
        env_file=os.getenv("ENV_FILE", ".env.local"),
        env_file_encoding='utf-8',
        case_sensitive=False,
        env_prefix="",
        # .env 파일이 없어도 에러 발생하지 않음
        extra="ignore"
    )


settings = Settings()
