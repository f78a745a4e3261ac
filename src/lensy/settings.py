"""应用配置。所有环境变量集中管理。"""
from __future__ import annotations
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # === App ===
    app_env: str = "development"
    log_level: str = "INFO"

    # === AWS ===
    aws_region: str = "us-east-1"

    # === Storage ===
    # 缺失时请求直接失败 (调用方无从获取结果)
    analysis_bucket: str = ""
    storage_backend: str = "minio"  # "minio" | "local"
    local_storage_dir: str = "/tmp/lensy-storage"
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False

    # === Cache index ===
    # 为空 = 不启用缓存 (不是错误)
    processed_content_table: str = ""
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl_seconds: int = 86400 * 7

    # === LLM ===
    bedrock_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("AWS_BEARER_TOKEN_BEDROCK", "BEDROCK_API_KEY"),
    )
    bedrock_endpoint: str = ""
    default_model: str = "claude"
    llm_timeout_seconds: float = 60.0
    llm_max_retries: int = 0
    llm_max_tokens: int = 2000
    content_char_budget: int = 3000

    # === Progress ===
    progress_enabled: bool = True

    model_config = {
        "env_file": ".env", "env_file_encoding": "utf-8",
        "extra": "ignore", "populate_by_name": True,
    }

    @property
    def cache_enabled(self) -> bool:
        return bool(self.processed_content_table)


settings = Settings()
