from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str
    direct_database_url: str = ""
    jwt_secret: str = Field(validation_alias=AliasChoices('jwt_secret', 'auth_jwt_secret'))
    jwt_audience: str = "authenticated"
    jwt_expires_hours: int = 168
    # wallet sign-in messages must name this domain and be at most this old
    auth_domain: str = "tempo-splits.local"
    auth_message_max_age: int = 300
    cors_origins: str = "http://localhost:3000"

    chain_id: int = 42429

    webhook_secret: str = ""
    webhook_timeout: float = 5.0

    auto_distribute_enabled: bool = True
    auto_distribute_interval: int = 3600
    # 10 USDC at 6 decimals; below this gas is not worth it
    auto_distribute_min_amount: int = 10_000_000


settings = Settings()
