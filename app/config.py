from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    liteapi_key: str
    anthropic_api_key: str = ""
    log_level: str = "INFO"
    detail_concurrency: int = 5
    detail_timeout: float = 8.0
    rate_limit_backoff: float = 2.0
    batch_timeout: float = 45.0
    content_stagger_ms: int = 300
    detail_stagger_ms: int = 1000
    detail_immediate_count: int = 3
