from .config import get_config, config_manager, ConfigurationManager, ConfigError, ConfigFileNotFoundError, InvalidYamlError
from .exceptions import (
    ListingReaderError,
    ConfigurationError,
    ComponentError,
    RendererError,
    ExtractorError,
    ReasoningError,
    InsufficientInformationError,
)
from .logger import setup_logging, get_logger

__all__ = [
    # Config
    "get_config",
    "config_manager",
    "ConfigurationManager",
    "ConfigError",
    "ConfigFileNotFoundError",
    "InvalidYamlError",
    # Logger
    "setup_logging",
    "get_logger",
    # Exceptions
    "ListingReaderError",
    "ConfigurationError",
    "ComponentError",
    "RendererError",
    "ExtractorError",
    "ReasoningError",
    "InsufficientInformationError",
]
