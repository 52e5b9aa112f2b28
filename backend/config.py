"""
Configuration module for the Opportunity Engine.
Loads and validates configuration from YAML file using Pydantic models.
Source credentials may also come from environment variables.
"""

from pydantic import BaseModel, Field
from typing import Dict, Mapping, Optional
import yaml
import os


# Maps credential field name to the environment variable that overrides it
CREDENTIAL_ENV_VARS: Dict[str, str] = {
    "moltbook_api_key": "MOLTBOOK_API_KEY",
    "twitter_bearer_token": "TWITTER_BEARER_TOKEN",
    "producthunt_api_key": "PRODUCTHUNT_API_KEY",
}


class Credentials(BaseModel):
    """API credentials for premium sources. Missing values trigger fallback records."""
    moltbook_api_key: Optional[str] = None
    twitter_bearer_token: Optional[str] = None
    producthunt_api_key: Optional[str] = None


class HttpSettings(BaseModel):
    """Outbound HTTP settings shared by all adapters."""
    user_agent: str = "arbitrage-engine/1.0"
    timeout: float = Field(default=8.0, gt=0)


class RunnerSettings(BaseModel):
    """Ingestion runner settings."""
    max_workers: int = Field(default=4, ge=1)
    source_timeout: float = Field(default=30.0, gt=0)
    default_limit: int = Field(default=50, ge=1)


class Config(BaseModel):
    """Main configuration model."""
    database_path: str = "data/opportunities.db"
    log_level: str = "INFO"
    http: HttpSettings = Field(default_factory=HttpSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    credentials: Credentials = Field(default_factory=Credentials)


def apply_env_credentials(config: Config, env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Override credentials with any non-empty environment variables.

    Args:
        config: Loaded Config object
        env: Environment mapping (default: os.environ)

    Returns:
        Config with credentials merged from the environment
    """
    env = os.environ if env is None else env
    overrides = {
        field: env[var]
        for field, var in CREDENTIAL_ENV_VARS.items()
        if env.get(var)
    }
    if not overrides:
        return config
    credentials = config.credentials.model_copy(update=overrides)
    return config.model_copy(update={"credentials": credentials})


def load_config(path: str = "config.yaml", env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Load and validate configuration from YAML file.

    Args:
        path: Path to configuration file (default: config.yaml)
        env: Environment mapping used for credential overrides (default: os.environ)

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML syntax is invalid
        ValueError: If config is empty or its structure is invalid
    """
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file not found: {path}\n"
            f"Please copy config.example.yaml to {path} and customize it."
        )

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(
            f"Invalid YAML syntax in {path}: {e}"
        )

    if data is None:
        raise ValueError(f"Configuration file {path} is empty")

    try:
        config = Config(**data)
    except Exception as e:
        raise ValueError(
            f"Invalid configuration structure in {path}: {e}\n"
            f"Please check config.example.yaml for the correct format."
        )

    return apply_env_credentials(config, env)
