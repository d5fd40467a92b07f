"""
Configuration management using Pydantic

This module provides application-wide configuration using Pydantic BaseSettings
with support for environment variables and type validation.
"""

from decimal import Decimal
from typing import Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application configuration settings.
    
    All settings can be overridden using environment variables.
    For example, BACKEND_PORT will override backend_port and
    STARTING_BALANCES='{"BTC": "5"}' replaces the starting wallet.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # API Configuration
    backend_host: str = Field(default="localhost", description="Backend server host")
    backend_port: int = Field(default=8000, description="Backend server port")
    
    # Participants
    simulated_user: str = Field(
        default="simuser",
        description="Owner id of the simulated participant whose sales are settled"
    )
    dataset_user: str = Field(
        default="dataset",
        description="Reserved owner id for background liquidity"
    )
    
    # Simulation Parameters
    starting_balances: Dict[str, Decimal] = Field(
        default={"BTC": Decimal("10"), "USDT": Decimal("100000")},
        description="Initial wallet balances of the simulated participant"
    )
    product_separator: str = Field(
        default="/",
        description="Separator between base and quote currency in a product code"
    )
    input_separator: str = Field(
        default=",",
        description="Separator between fields of a typed order line"
    )
    trade_journal_size: int = Field(
        default=10000,
        description="Number of recent sales kept in memory"
    )
    
    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for log files (console only when unset)"
    )
    log_json: bool = Field(
        default=False,
        description="Emit structured JSON log lines"
    )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.
    
    Returns:
        Settings instance
    """
    return settings
