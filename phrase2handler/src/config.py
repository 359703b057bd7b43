"""
Phrase2Handler Configuration Module

Handles all configuration settings for the listener and dispatch pipeline.
Supports environment variables, .env files, and programmatic configuration.

Configuration can be set via:
1. Environment variables (P2H_PRIMARY_ACTION_KEY, P2H_GRAMMAR_PATH, etc.)
2. .env file in the project root
3. Programmatic configuration via create_config()
"""

import os
import logging
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class StartBehavior(Enum):
    """Whether the recognizer starts on activation or waits for start()."""
    AUTO_START = "auto"
    MANUAL_START = "manual"

    @classmethod
    def parse(cls, value: str) -> "StartBehavior":
        if isinstance(value, StartBehavior):
            return value
        normalized = str(value).strip().lower().replace("_start", "")
        for behavior in cls:
            if behavior.value == normalized:
                return behavior
        raise ValueError(f"Unknown start behavior '{value}' (expected 'auto' or 'manual')")


@dataclass
class ListenerConfig:
    """Configuration for the grammar listener."""

    # Semantic key whose first value selects the action (e.g. Out.action)
    primary_action_key: str = field(
        default_factory=lambda: os.getenv("P2H_PRIMARY_ACTION_KEY", "action")
    )

    # Directory the grammar path is resolved against
    grammar_root: str = field(
        default_factory=lambda: os.getenv("P2H_GRAMMAR_ROOT", ".")
    )

    # Grammar file, relative to grammar_root
    grammar_path: str = field(
        default_factory=lambda: os.getenv("P2H_GRAMMAR_PATH", "")
    )

    start_behavior: StartBehavior = field(
        default_factory=lambda: StartBehavior.parse(os.getenv("P2H_START_BEHAVIOR", "auto"))
    )

    def resolve_grammar_file(self) -> Path:
        """Full path of the grammar file."""
        return Path(self.grammar_root) / self.grammar_path


@dataclass
class VocabularyConfig:
    """Configuration for loading the action vocabulary."""

    # Path to the vocabulary JSON file
    vocabulary_path: Optional[str] = field(
        default_factory=lambda: os.getenv("P2H_VOCABULARY_PATH")
    )


@dataclass
class DispatchConfig:
    """
    Main configuration for phrase dispatch.

    Example usage:
        # From environment variables
        config = DispatchConfig()

        # Programmatic configuration
        config = create_config(
            grammar_root="assets",
            grammar_path="commands.grxml",
            start_behavior="manual"
        )
    """

    listener: ListenerConfig = field(default_factory=ListenerConfig)
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)

    # Logging settings
    log_level: str = field(
        default_factory=lambda: os.getenv("P2H_LOG_LEVEL", "INFO")
    )
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("P2H_LOG_FILE")
    )

    @classmethod
    def from_env(cls) -> "DispatchConfig":
        """Create configuration from environment variables."""
        return cls()

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "DispatchConfig":
        """
        Create configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            DispatchConfig instance
        """
        listener_cfg = config_dict.get("listener", {})
        vocabulary_cfg = config_dict.get("vocabulary", {})

        return cls(
            listener=ListenerConfig(
                primary_action_key=listener_cfg.get(
                    "primary_action_key", os.getenv("P2H_PRIMARY_ACTION_KEY", "action")
                ),
                grammar_root=listener_cfg.get("grammar_root", os.getenv("P2H_GRAMMAR_ROOT", ".")),
                grammar_path=listener_cfg.get("grammar_path", os.getenv("P2H_GRAMMAR_PATH", "")),
                start_behavior=StartBehavior.parse(listener_cfg.get("start_behavior", "auto")),
            ),
            vocabulary=VocabularyConfig(
                vocabulary_path=vocabulary_cfg.get("vocabulary_path"),
            ),
            log_level=config_dict.get("log_level", "INFO"),
            log_file=config_dict.get("log_file"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration to dictionary."""
        return {
            "listener": {
                "primary_action_key": self.listener.primary_action_key,
                "grammar_root": self.listener.grammar_root,
                "grammar_path": self.listener.grammar_path,
                "start_behavior": self.listener.start_behavior.value,
            },
            "vocabulary": {
                "vocabulary_path": self.vocabulary.vocabulary_path,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
        }


def get_default_config() -> DispatchConfig:
    """Get the default configuration from environment."""
    return DispatchConfig.from_env()


def create_config(
    primary_action_key: Optional[str] = None,
    grammar_root: Optional[str] = None,
    grammar_path: Optional[str] = None,
    vocabulary_path: Optional[str] = None,
    start_behavior: Optional[str] = None,
    **kwargs
) -> DispatchConfig:
    """
    Convenience function to create a configuration.

    Args:
        primary_action_key: Semantic key that selects the action
        grammar_root: Directory containing grammar files
        grammar_path: Grammar file relative to grammar_root
        vocabulary_path: Path to vocabulary JSON
        start_behavior: "auto" or "manual"
        **kwargs: Additional configuration options (log_level, log_file)

    Returns:
        Configured DispatchConfig
    """
    config = DispatchConfig()

    if primary_action_key:
        config.listener.primary_action_key = primary_action_key
    if grammar_root:
        config.listener.grammar_root = grammar_root
    if grammar_path:
        config.listener.grammar_path = grammar_path
    if vocabulary_path:
        config.vocabulary.vocabulary_path = vocabulary_path
    if start_behavior:
        config.listener.start_behavior = StartBehavior.parse(start_behavior)

    if "log_level" in kwargs:
        config.log_level = kwargs["log_level"]
    if "log_file" in kwargs:
        config.log_file = kwargs["log_file"]

    return config


def configure_logging(config: DispatchConfig) -> logging.Logger:
    """
    Apply the configured level (and optional log file) to the package logger.

    Returns:
        The package logger
    """
    package_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
    package_logger.setLevel(config.log_level.upper())

    if config.log_file:
        # One handler per file across repeated calls
        path = os.path.abspath(config.log_file)
        for existing in package_logger.handlers:
            if isinstance(existing, logging.FileHandler) and existing.baseFilename == path:
                return package_logger

        handler = logging.FileHandler(config.log_file)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        package_logger.addHandler(handler)

    return package_logger
