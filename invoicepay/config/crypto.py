from pydantic import BaseModel, SecretStr, model_validator


class CryptoSettings(BaseModel):
    """Business-wide crypto payment configuration."""

    # Default receiving addresses (invoices may override per method)
    usdc_enabled: bool = False
    usdc_address: str = ""
    bsv_enabled: bool = False
    bsv_address: str = ""

    # Etherscan
    etherscan_api_key: SecretStr = SecretStr("")
    testnet: bool = False  # Sepolia / BSV testnet

    # HTTP behaviour
    request_timeout_seconds: float = 30.0
    rate_limit_per_second: float = 5.0  # Etherscan free tier
    max_retries: int = 3  # Retries after a rate-limit response
    retry_base_delay_seconds: float = 1.0

    @model_validator(mode="after")
    def validate_crypto_config(self) -> "CryptoSettings":
        """Validate that enabled methods have a default address."""
        if self.usdc_enabled and not self.usdc_address.strip():
            raise ValueError(
                "INVOICEPAY_CRYPTO__USDC_ADDRESS required when INVOICEPAY_CRYPTO__USDC_ENABLED=true"
            )
        if self.bsv_enabled and not self.bsv_address.strip():
            raise ValueError(
                "INVOICEPAY_CRYPTO__BSV_ADDRESS required when INVOICEPAY_CRYPTO__BSV_ENABLED=true"
            )
        if self.request_timeout_seconds <= 0:
            raise ValueError("INVOICEPAY_CRYPTO__REQUEST_TIMEOUT_SECONDS must be positive")
        if self.rate_limit_per_second <= 0:
            raise ValueError("INVOICEPAY_CRYPTO__RATE_LIMIT_PER_SECOND must be positive")
        if self.max_retries < 0:
            raise ValueError("INVOICEPAY_CRYPTO__MAX_RETRIES cannot be negative")
        return self
