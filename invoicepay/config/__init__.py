from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .crypto import CryptoSettings
from .invoice import InvoiceSettings
from .logs import LogSettings
from .storage import StorageSettings


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="INVOICEPAY_",
        extra="ignore",
    )

    crypto: CryptoSettings = Field(default_factory=CryptoSettings)
    invoice: InvoiceSettings = Field(default_factory=InvoiceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logs: LogSettings = Field(default_factory=LogSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()
