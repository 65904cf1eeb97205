"""Configuration and logging for the documentation search pipeline."""

from .logging import configure_logging, get_logger, log_performance
from .settings import (
    ContextConfig,
    CorpusConfig,
    CurationConfig,
    IndexFieldWeights,
    LoggingConfig,
    ScoringWeights,
    SearchConfig,
    Settings,
    get_settings,
)

__all__ = [
    "ContextConfig",
    "CorpusConfig",
    "CurationConfig",
    "IndexFieldWeights",
    "LoggingConfig",
    "ScoringWeights",
    "SearchConfig",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
    "log_performance",
]
