"""
Configuration management for the agent dispatch system.

This module handles loading and managing configuration for the dispatch
core, including environment variables, API keys, conversation limits,
timeouts and default model settings for agents.
"""

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class LogLevel(str, Enum):
    """Log levels supported by the system."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AgentModelConfig(BaseModel):
    """Configuration for an agent's LLM model."""

    name: str = Field(..., description="Model name to use")
    temperature: float = Field(default=0.7, description="Model temperature")
    max_tokens: int | None = Field(default=800, description="Max tokens to generate")

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        """Validate temperature is within reasonable bounds."""
        if not (0.0 <= value <= 1.0):
            raise ValueError(f"Temperature must be between 0.0 and 1.0, got {value}")
        return value

    @classmethod
    def from_env(cls, prefix: str = "") -> "AgentModelConfig":
        """Create an AgentModelConfig from environment variables."""
        prefix = f"{prefix}_" if prefix else ""
        return cls(
            name=os.getenv(f"{prefix}MODEL", os.getenv("MODEL", "gemini-2.5-flash")),
            temperature=float(os.getenv(f"{prefix}TEMPERATURE", "0.7")),
            max_tokens=int(os.getenv(f"{prefix}MAX_TOKENS", "800")) or None,
        )


class APIConfig(BaseModel):
    """Configuration for the completion service."""

    gemini_api_key: str = Field(default="", description="Gemini API key")

    class ValidationError(Exception):
        """Exception raised for API configuration validation errors."""

        def __init__(self, missing_keys: list[str]):
            self.missing_keys = missing_keys
            super().__init__(f"Missing required API keys: {', '.join(missing_keys)}")

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create an APIConfig from environment variables."""
        return cls(gemini_api_key=os.getenv("GEMINI_API_KEY", ""))

    def validate(self, raise_error: bool = False) -> bool:
        """
        Validate that required API keys are present.

        Args:
            raise_error: If True, raise ValidationError instead of returning False

        Returns:
            True if all required keys are present, False otherwise
        """
        missing_keys = []
        if not self.gemini_api_key:
            missing_keys.append("GEMINI_API_KEY")

        if missing_keys:
            logger.error(f"Missing required API keys: {', '.join(missing_keys)}")
            if raise_error:
                raise self.ValidationError(missing_keys)
            return False

        return True


class SystemConfig(BaseModel):
    """System-wide configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    environment: str = Field(
        default="development",
        description="Environment (development, staging, production)",
    )
    max_history: int = Field(
        default=10, description="Conversation entries kept per session, system excluded"
    )
    session_ttl_seconds: float = Field(
        default=1800, description="Idle time after which a session is evicted"
    )
    agent_timeout_seconds: float = Field(
        default=60, description="Upper bound for one agent invocation"
    )
    tool_timeout_seconds: float = Field(
        default=30, description="Upper bound for one tool handler call"
    )
    request_timeout_seconds: float = Field(
        default=30, description="Upper bound for one completion request"
    )
    gateway_max_retries: int = Field(
        default=1, description="Retries for a failed completion request"
    )
    gateway_retry_jitter: float = Field(
        default=1.0, description="Maximum random wait before a retry, in seconds"
    )
    requests_per_minute: int = Field(
        default=60, description="Completion requests allowed per minute"
    )

    @classmethod
    def from_env(cls) -> "SystemConfig":
        """Create a SystemConfig from environment variables."""
        return cls(
            log_level=LogLevel(os.getenv("LOG_LEVEL", "INFO")),
            environment=os.getenv("ENVIRONMENT", "development"),
            max_history=int(os.getenv("MAX_HISTORY", "10")),
            session_ttl_seconds=float(os.getenv("SESSION_TTL_SECONDS", "1800")),
            agent_timeout_seconds=float(os.getenv("AGENT_TIMEOUT_SECONDS", "60")),
            tool_timeout_seconds=float(os.getenv("TOOL_TIMEOUT_SECONDS", "30")),
            request_timeout_seconds=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30")),
            gateway_max_retries=int(os.getenv("GATEWAY_MAX_RETRIES", "1")),
            gateway_retry_jitter=float(os.getenv("GATEWAY_RETRY_JITTER", "1.0")),
            requests_per_minute=int(os.getenv("REQUESTS_PER_MINUTE", "60")),
        )


@dataclass
class DispatchConfig:
    """Main configuration class for the agent dispatch system."""

    api: APIConfig = field(default_factory=APIConfig.from_env)
    system: SystemConfig = field(default_factory=SystemConfig.from_env)
    agent_models: dict[str, AgentModelConfig] = field(default_factory=dict)

    def __post_init__(self):
        """Initialize agent models if not provided."""
        if not self.agent_models:
            self.agent_models = {
                "default": AgentModelConfig.from_env(),
                "router": AgentModelConfig.from_env("ROUTER"),
            }

    class ConfigurationError(Exception):
        """Exception raised for configuration validation errors."""

        pass

    def validate(self, raise_error: bool = False) -> bool:
        """
        Validate the entire configuration.

        Args:
            raise_error: If True, raise ConfigurationError instead of returning False

        Returns:
            True if configuration is valid, False otherwise
        """
        try:
            self.api.validate(raise_error=True)

            if self.system.max_history < 2:
                raise ValueError("Max history must hold at least one exchange")
            if self.system.agent_timeout_seconds <= 0:
                raise ValueError("Agent timeout must be positive")
            if self.system.requests_per_minute <= 0:
                raise ValueError("Requests per minute must be positive")

            return True

        except Exception as e:
            if not isinstance(e, self.api.ValidationError):
                logger.error(f"Configuration validation failed: {e!s}")

            if raise_error:
                raise self.ConfigurationError(
                    f"Configuration validation failed: {e!s}"
                ) from e

            return False

    def get_agent_model(self, agent_type: str) -> AgentModelConfig:
        """
        Get model configuration for a specific agent type.

        Args:
            agent_type: Type of agent to get model config for

        Returns:
            AgentModelConfig for the requested agent type, or the default
        """
        return self.agent_models.get(
            agent_type,
            self.agent_models.get("default", AgentModelConfig(name="gemini-2.5-flash")),
        )


# Global configuration instance
config = DispatchConfig()


def initialize_config(
    custom_config_path: str | None = None,
    validate: bool = True,
    raise_on_error: bool = False,
) -> DispatchConfig:
    """
    Initialize and validate the configuration.

    Args:
        custom_config_path: Path to a custom .env file to load
        validate: Whether to validate the configuration
        raise_on_error: Whether to raise an exception on validation failure

    Returns:
        Initialized and validated configuration object

    Raises:
        DispatchConfig.ConfigurationError: If validation fails and
            raise_on_error is True
        FileNotFoundError: If custom_config_path is provided but does not exist
    """
    if custom_config_path:
        if not os.path.exists(custom_config_path):
            error_msg = f"Custom configuration file not found: {custom_config_path}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        logger.info(f"Loading custom configuration from {custom_config_path}")
        load_dotenv(custom_config_path, override=True)

        # Reload into the shared instance so existing importers see the update
        config.api = APIConfig.from_env()
        config.system = SystemConfig.from_env()
        config.agent_models = {}
        config.__post_init__()

    if validate and not config.validate(raise_error=raise_on_error):
        logger.warning(
            "Configuration validation failed. Completion requests will fail "
            "until GEMINI_API_KEY is set in the environment or a .env file."
        )

    return config
