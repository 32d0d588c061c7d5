"""Baseline async configuration resolved from the environment.

Resolution order for each slot (first match wins):
1. Environment variable ``<PREFIX><NAME>``
2. .env file value (python-dotenv, loaded once)
3. ``BUILTIN_DEFAULTS``

Recognised variables (with the default ``SERVICE_CLIENT_`` prefix):
    SERVICE_CLIENT_TIMEOUT          seconds, float
    SERVICE_CLIENT_MAX_RETRIES      int
    SERVICE_CLIENT_RETRY_STRATEGY   none | idempotent_only | rate_limited
    SERVICE_CLIENT_MAX_CONCURRENCY  int

Example:
    ```python
    provider = EnvironmentConfigurationProvider(prefix="BILLING_")
    builder = ClientBuilder(defaults_provider=provider)
    ```
"""

import dataclasses
import logging
import os
from threading import Lock
from typing import Protocol, runtime_checkable

import httpx
from dotenv import load_dotenv

from service_client_core.config.composer import compose
from service_client_core.config.models import RETRY_STRATEGIES, AsyncConfiguration, RetryPolicy
from service_client_core.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BUILTIN_DEFAULTS = AsyncConfiguration(
    timeout=httpx.Timeout(30.0),
    retry_policy=RetryPolicy(),
    max_concurrency=100,
    headers={},
)


@runtime_checkable
class DefaultConfigurationProvider(Protocol):
    """Supplies the baseline configuration a builder starts from."""

    def default_configuration(self) -> AsyncConfiguration: ...


class StaticConfigurationProvider:
    """Provider returning a fixed configuration, completed with BUILTIN_DEFAULTS."""

    def __init__(self, configuration: AsyncConfiguration = BUILTIN_DEFAULTS):
        self._configuration = configuration

    def default_configuration(self) -> AsyncConfiguration:
        return compose(BUILTIN_DEFAULTS, self._configuration)


class EnvironmentConfigurationProvider:
    """Resolve baseline configuration from environment variables and a .env file.

    Attributes:
        prefix: Prefix of every variable name read by this provider.
    """

    def __init__(self, prefix: str = "SERVICE_CLIENT_", dotenv_path: str | None = None, load_dotenv: bool = True):
        """Initialize the provider.

        Args:
            prefix: Prefix of every variable name read by this provider.
            dotenv_path: Path to .env file. If None, python-dotenv searches
                parent directories.
            load_dotenv: Whether to load a .env file at all.
        """
        self.prefix = prefix
        self._dotenv_path = dotenv_path
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()

        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        if self._dotenv_loaded:
            return

        with self._dotenv_lock:
            if self._dotenv_loaded:
                return

            try:
                # Never overrides variables already present in os.environ
                load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for default configuration")
            except OSError as e:
                logger.warning(f"Failed to load .env file: {e}")
            self._dotenv_loaded = True

    def _read(self, name: str) -> tuple[str, str | None]:
        env_var_name = f"{self.prefix}{name}"
        value = os.environ.get(env_var_name)
        if value is not None:
            value = value.strip()
            logger.debug(f"Resolved {env_var_name}={value!r} from environment")
        return env_var_name, value or None

    def _read_number(self, name: str, kind: type[int] | type[float]) -> int | float | None:
        env_var_name, raw = self._read(name)
        if raw is None:
            return None
        try:
            return kind(raw)
        except ValueError:
            raise ConfigurationError(
                f"{env_var_name} must be {'an integer' if kind is int else 'a number'}, got {raw!r}",
                setting_name=env_var_name,
            ) from None

    def default_configuration(self) -> AsyncConfiguration:
        """Return a complete configuration: environment values over BUILTIN_DEFAULTS.

        Raises:
            ConfigurationError: If a variable is set but cannot be parsed.
        """
        builder = BUILTIN_DEFAULTS.to_builder()

        timeout = self._read_number("TIMEOUT", float)
        if timeout is not None:
            builder.timeout(httpx.Timeout(timeout))

        policy = BUILTIN_DEFAULTS.retry_policy
        max_retries = self._read_number("MAX_RETRIES", int)
        if max_retries is not None:
            policy = dataclasses.replace(policy, max_retries=max_retries)

        strategy_var, strategy = self._read("RETRY_STRATEGY")
        if strategy is not None:
            if strategy not in RETRY_STRATEGIES:
                raise ConfigurationError(
                    f"{strategy_var} must be one of {sorted(RETRY_STRATEGIES)}, got {strategy!r}",
                    setting_name=strategy_var,
                )
            policy = dataclasses.replace(policy, strategy=strategy)
        builder.retry_policy(policy)

        max_concurrency = self._read_number("MAX_CONCURRENCY", int)
        if max_concurrency is not None:
            builder.max_concurrency(max_concurrency)

        return builder.build()
