"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from .currency import Currency


class SavingsConfig(BaseSettings):
    """Savings ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="SAVINGS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Ledger configuration
    currency: str = "GHS"  # ISO 4217 code of the ledger currency

    # API configuration
    api_title: str = "Money Savings System"
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    def get_currency(self) -> Currency:
        """Resolve the configured currency code"""
        try:
            return Currency[self.currency.upper()]
        except KeyError:
            raise ValueError(f"Unsupported currency: {self.currency}")


# Global configuration instance
config = SavingsConfig()


def get_config() -> SavingsConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SavingsConfig:
    """Reload configuration from environment"""
    global config
    config = SavingsConfig()
    return config
