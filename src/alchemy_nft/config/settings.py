from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.errors import ConfigurationError


class Network(str, Enum):
    """Alchemy 支援的網路代號，亦為 API 主機名稱前綴。"""

    ETH_MAINNET = "eth-mainnet"
    ETH_GOERLI = "eth-goerli"
    ETH_SEPOLIA = "eth-sepolia"
    OPT_MAINNET = "opt-mainnet"
    OPT_GOERLI = "opt-goerli"
    ARB_MAINNET = "arb-mainnet"
    ARB_GOERLI = "arb-goerli"
    MATIC_MAINNET = "polygon-mainnet"
    MATIC_MUMBAI = "polygon-mumbai"
    BASE_MAINNET = "base-mainnet"


class AlchemySettings(BaseSettings):
    """Alchemy 用戶端設定，建立後即不可修改。"""

    api_key: str = Field("demo", alias="ALCHEMY_API_KEY")
    network: Network = Field(Network.ETH_MAINNET, alias="ALCHEMY_NETWORK")
    url: Optional[str] = Field(None, alias="ALCHEMY_URL")
    request_timeout: float = Field(30.0, gt=0, alias="ALCHEMY_REQUEST_TIMEOUT")
    max_retries: int = Field(5, ge=1, alias="ALCHEMY_MAX_RETRIES")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @property
    def base_url(self) -> str:
        """NFT API 的基底網址；指定 ALCHEMY_URL 時直接使用。"""

        if self.url:
            return self.url.rstrip("/")
        return f"https://{self.network.value}.g.alchemy.com/nft/v2/{self.api_key}"

    @field_validator("url", mode="before")
    @classmethod
    def _empty_url(cls, value: Optional[str]) -> Optional[str]:
        if value in (None, "", "null", "None"):
            return None
        return value


@lru_cache(maxsize=1)
def get_settings() -> AlchemySettings:
    """載入並快取設定；環境變數格式錯誤時拋出 ConfigurationError。"""

    try:
        return AlchemySettings()
    except ValidationError as error:
        raise ConfigurationError(f"設定值不正確：{error}") from error
