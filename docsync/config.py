"""
Configuration management: process settings from environment variables and
the per-run documentation config snapshot.
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from docsync.exceptions import ConfigurationError, MissingCredentialError
from docsync.utils.logger import get_logger

# Load .env file early (for local/dev)
load_dotenv()

logger = get_logger(__name__, "Configuration")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def detect_provider(model: str) -> str:
    """LLM provider for a model name, by prefix."""
    if model.startswith("claude"):
        return "anthropic"
    if model.startswith(("gpt", "o1", "o3", "o4")):
        return "openai"
    raise ConfigurationError(f"Cannot auto-detect provider for model '{model}'")


class Config:
    """Process configuration loaded from environment variables."""

    # API Keys
    GITHUB_TOKEN: Optional[str] = os.getenv("GITHUB_TOKEN")
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
    ANTHROPIC_API_KEY: Optional[str] = os.getenv("ANTHROPIC_API_KEY")

    # Content generation
    GENERATOR_MODEL: str = os.getenv("GENERATOR_MODEL", "gpt-4-turbo-preview")
    GENERATOR_MAX_TOKENS: int = _int_env("GENERATOR_MAX_TOKENS", 4096)
    LLM_TIMEOUT: int = _int_env("LLM_TIMEOUT", 120)

    # Discovery
    DISCOVERY_MAX_WORKERS: int = _int_env("DISCOVERY_MAX_WORKERS", 8)

    # Application Settings
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = _int_env("API_PORT", 8091)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")
    DOCSYNC_CONFIG_FILE: Optional[str] = os.getenv("DOCSYNC_CONFIG_FILE")

    @classmethod
    def llm_api_key_name(cls, model: Optional[str] = None) -> str:
        """Name of the credential the given model's provider needs."""
        model = model or cls.GENERATOR_MODEL
        return "ANTHROPIC_API_KEY" if detect_provider(model) == "anthropic" else "OPENAI_API_KEY"

    @classmethod
    def require_credentials(cls, model: Optional[str] = None, github: bool = True, llm: bool = True) -> None:
        """
        Fail fast before any remote call if a credential is missing.

        Args:
            model: Generator model; decides which LLM key is needed
            github: Whether GITHUB_TOKEN is required
            llm: Whether the LLM provider key is required

        Raises:
            MissingCredentialError: naming every missing variable
        """
        required = {}
        if github:
            required["GITHUB_TOKEN"] = cls.GITHUB_TOKEN
        if llm:
            key_name = cls.llm_api_key_name(model)
            required[key_name] = getattr(cls, key_name)
        missing = [name for name, value in required.items() if not value]
        if missing:
            logger.critical("Missing required credentials: " + ", ".join(missing), run_id="INIT")
            raise MissingCredentialError(f"Missing required credentials: {', '.join(missing)}")


class MatchRules(BaseModel):
    """Rules mapping source files onto documentation files."""
    model_config = ConfigDict(frozen=True)

    source_root: str = "src/"
    docs_root: str = "docs/"
    source_extensions: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".py")
    doc_extensions: Tuple[str, ...] = (".mdx", ".md")
    doc_extension: str = ".mdx"
    navigation_path: str = "mint.json"


class LLMOptions(BaseModel):
    """Generation options handed to the content generator."""
    model_config = ConfigDict(frozen=True)

    model: str = Field(default_factory=lambda: Config.GENERATOR_MODEL)
    temperature: float = 0.3
    max_tokens: int = Field(default_factory=lambda: Config.GENERATOR_MAX_TOKENS)
    style_guide: Optional[str] = None
    min_content_length: int = 100
    placeholder_markers: Tuple[str, ...] = ("TODO", "placeholder")

    @field_validator("model")
    @classmethod
    def _known_provider(cls, model: str) -> str:
        detect_provider(model)
        return model


class DocConfig(BaseModel):
    """Immutable configuration snapshot carried in the pipeline state."""
    model_config = ConfigDict(frozen=True)

    match_rules: MatchRules = Field(default_factory=MatchRules)
    stable_branch: str = "main"
    labels: Tuple[str, ...] = ("documentation",)
    llm: LLMOptions = Field(default_factory=LLMOptions)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DocConfig":
        try:
            return cls.model_validate(data or {})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid docsync configuration: {e}") from e

    @classmethod
    def from_yaml(cls, path: str) -> "DocConfig":
        """Load a config snapshot from a YAML file; missing keys take defaults."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Config file is not valid YAML: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")

        logger.debug(f"Loaded docsync config from {path}", run_id="INIT")
        return cls.from_dict(data)


def load_doc_config(path: Optional[str] = None) -> DocConfig:
    """Load DocConfig from the given file, DOCSYNC_CONFIG_FILE, or defaults."""
    path = path or Config.DOCSYNC_CONFIG_FILE
    if path:
        return DocConfig.from_yaml(path)
    return DocConfig()


config = Config()
