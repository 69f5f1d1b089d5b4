"""
Configuration for the claim client.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HD_PATH = "m/44'/118'/0'/0/0"


class Settings(BaseSettings):
    """
    Claim client settings.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Claim backend
    api_url: str = Field(
        default="https://claim.vidulum.app/api",
        description="Claim backend base URL",
        alias="CLAIM_API_URL",
    )
    api_timeout: float = Field(
        default=20.0,
        description="HTTP timeout for backend calls (seconds)",
        alias="CLAIM_API_TIMEOUT",
    )

    # Chains
    source_prefix: str = Field(default="vdl", description="Bech32 prefix of the source chain")
    dest_prefix: str = Field(default="bze", description="Bech32 prefix of the destination chain")
    chain_id: str = Field(
        default="vidulum-1",
        description="Chain identifier requested from the wallet extension",
        alias="CLAIM_CHAIN_ID",
    )
    hd_path: str = Field(default=DEFAULT_HD_PATH, description="BIP-32 path for mnemonic derivation")
    coin_denom: str = Field(default="VDL", description="Display denomination of the claim amount")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, description="Render logs as JSON", alias="LOG_JSON")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
