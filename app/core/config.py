from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "erc20-trade-bot"
    env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    telegram_bot_token: str = Field(default="", alias="TELEGRAM_BOT_TOKEN")
    telegram_use_webhook: bool = False
    telegram_webhook_url: str = ""
    telegram_webhook_path: str = "/telegram/webhook"
    telegram_webhook_secret: str = ""
    telegram_auto_set_webhook: bool = Field(default=True, alias="TELEGRAM_AUTO_SET_WEBHOOK")

    redis_url: str = "redis://redis:6379/0"

    alchemy_rpc_url: str = Field(default="https://eth-mainnet.g.alchemy.com/v2", alias="ALCHEMY_RPC_URL")
    alchemy_api_key: str = Field(default="", alias="ALCHEMY_API_KEY")
    wallet_address: str = Field(default="", alias="WALLET_ADDRESS")
    etherscan_api_url: str = Field(default="https://api.etherscan.io/v2/api", alias="ETHERSCAN_API_URL")
    etherscan_api_key: str = Field(default="", alias="ETHERSCAN_API_KEY")
    etherscan_chain_id: int = Field(default=1, alias="ETHERSCAN_CHAIN_ID")

    http_timeout_sec: float = Field(default=10.0, alias="HTTP_TIMEOUT_SEC")
    http_retries: int = Field(default=2, alias="HTTP_RETRIES")
    quote_cache_ttl_sec: int = Field(default=15, alias="QUOTE_CACHE_TTL_SEC")

    watch_monitor_enabled: bool = Field(default=True, alias="WATCH_MONITOR_ENABLED")
    watch_poll_interval_sec: int = Field(default=60, alias="WATCH_POLL_INTERVAL_SEC")
    watch_min_change_eth: float = Field(default=0.0, alias="WATCH_MIN_CHANGE_ETH")

    # legacy compatibility: one intent/watch list for every chat, and intents
    # stored even when some fields failed validation
    shared_intent_store: bool = Field(default=False, alias="SHARED_INTENT_STORE")
    persist_partial_intents: bool = Field(default=False, alias="PERSIST_PARTIAL_INTENTS")

    def alchemy_endpoint(self) -> str:
        base = self.alchemy_rpc_url.rstrip("/")
        return f"{base}/{self.alchemy_api_key}" if self.alchemy_api_key else base


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
