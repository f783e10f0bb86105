"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class EphemeralStoreConfig(BaseModel):
    """Scoped ephemeral store configuration."""

    backend_url: str = Field(
        default="memory://",
        alias="TOOLFORGE_AI_EPHEMERAL_STORE_URL",
        description="'memory://' or an async SQLAlchemy URL such as 'sqlite+aiosqlite:///tmp.db'",
    )
    key_prefix: str = Field(
        default="ai_agent_tmp_",
        alias="TOOLFORGE_AI_EPHEMERAL_KEY_PREFIX",
        description="Prefix placed before the owner id of every namespaced key",
    )
    ttl_seconds: int = Field(
        default=86400,
        alias="TOOLFORGE_AI_EPHEMERAL_TTL_SECONDS",
        description="Fixed expiry applied to every saved entry",
    )

    model_config = {"populate_by_name": True}


class ConfigStorageConfig(BaseModel):
    """Active/staging configuration directories used by the config tools."""

    active_dir: Optional[str] = Field(
        default=None,
        alias="TOOLFORGE_AI_CONFIG_ACTIVE_DIR",
        description="Directory of *.yml files holding the active configuration",
    )
    staging_dir: Optional[str] = Field(
        default=None,
        alias="TOOLFORGE_AI_CONFIG_STAGING_DIR",
        description="Directory of *.yml files holding the staged (sync) configuration",
    )
    modules_root: Optional[str] = Field(
        default=None,
        alias="TOOLFORGE_AI_MODULES_ROOT",
        description="Directory whose sub-directories are the modules schema files may be written to",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Toolforge-AI server host address to bind to",
        alias="TOOLFORGE_AI_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Toolforge-AI server port number",
        alias="TOOLFORGE_AI_SERVER_PORT",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="TOOLFORGE_AI_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="simple, detailed or json", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write DEBUG logs to a file", alias="ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # Runtime Configuration
    # =====================================================================
    elevated_principal_id: str = Field(
        default="1",
        description="Id of the highest-trust principal capabilities execute as",
        alias="TOOLFORGE_AI_ELEVATED_PRINCIPAL_ID",
    )
    invoke_permission: Optional[str] = Field(
        default=None,
        description="Permission a caller must hold to invoke capabilities (unset: any caller)",
        alias="TOOLFORGE_AI_INVOKE_PERMISSION",
    )
    agents_file: Optional[str] = Field(
        default=None,
        description="YAML file listing agent definitions",
        alias="TOOLFORGE_AI_AGENTS_FILE",
    )

    # =====================================================================
    # Ephemeral Store Configuration
    # =====================================================================
    ephemeral_store_url: str = Field(default="memory://", alias="TOOLFORGE_AI_EPHEMERAL_STORE_URL")
    ephemeral_key_prefix: str = Field(default="ai_agent_tmp_", alias="TOOLFORGE_AI_EPHEMERAL_KEY_PREFIX")
    ephemeral_ttl_seconds: int = Field(default=86400, alias="TOOLFORGE_AI_EPHEMERAL_TTL_SECONDS")

    # =====================================================================
    # Config Storage Configuration
    # =====================================================================
    config_active_dir: Optional[str] = Field(default=None, alias="TOOLFORGE_AI_CONFIG_ACTIVE_DIR")
    config_staging_dir: Optional[str] = Field(default=None, alias="TOOLFORGE_AI_CONFIG_STAGING_DIR")
    modules_root: Optional[str] = Field(default=None, alias="TOOLFORGE_AI_MODULES_ROOT")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def ephemeral_store(self) -> EphemeralStoreConfig:
        """Get ephemeral store configuration from environment variables."""
        return EphemeralStoreConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def config_storage(self) -> ConfigStorageConfig:
        """Get config storage configuration from environment variables."""
        return ConfigStorageConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
