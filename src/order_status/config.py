"""Application configuration via Pydantic BaseSettings."""

from typing import NamedTuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class StoreConfig(NamedTuple):
    """Validated store credentials handed to the order-status service."""

    shop: str
    access_token: str
    api_version: str
    signing_secret: str | None = None


class Settings(BaseSettings):
    """Typed settings for environment-driven configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Order Status Proxy"
    shopify_shop: str | None = None
    shopify_access_token: str | None = None
    shopify_api_version: str = "2026-01"
    # Optional; when unset the proxy signature is not checked
    shopify_api_secret: str | None = None
    shopify_timeout: float = 10.0
    log_level: str = "INFO"

    def store_config(self) -> StoreConfig:
        """Return the validated store credentials or raise ConfigurationError."""
        missing = []
        if not self.shopify_shop:
            missing.append("SHOPIFY_SHOP")
        if not self.shopify_access_token:
            missing.append("SHOPIFY_ACCESS_TOKEN")
        if missing:
            raise ConfigurationError(message=f"Missing {' / '.join(missing)} env")

        return StoreConfig(
            shop=self.shopify_shop.strip(),
            access_token=self.shopify_access_token,
            api_version=self.shopify_api_version or "2026-01",
            signing_secret=self.shopify_api_secret or None,
        )
