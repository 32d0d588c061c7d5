"""Async configuration: models, composition and default providers."""

from service_client_core.config.composer import ConfigurationFragment, Configurator, compose, normalize
from service_client_core.config.environment import (
    BUILTIN_DEFAULTS,
    DefaultConfigurationProvider,
    EnvironmentConfigurationProvider,
    StaticConfigurationProvider,
)
from service_client_core.config.models import (
    RETRY_STRATEGIES,
    AsyncConfiguration,
    AsyncConfigurationBuilder,
    RetryPolicy,
)

__all__ = [
    "BUILTIN_DEFAULTS",
    "RETRY_STRATEGIES",
    "AsyncConfiguration",
    "AsyncConfigurationBuilder",
    "ConfigurationFragment",
    "Configurator",
    "DefaultConfigurationProvider",
    "EnvironmentConfigurationProvider",
    "RetryPolicy",
    "StaticConfigurationProvider",
    "compose",
    "normalize",
]
