"""Field-wise composition of async configurations.

A fragment is either a finished ``AsyncConfiguration`` or a configurator
callable receiving an ``AsyncConfigurationBuilder``. Both forms are normalized
to an ``AsyncConfiguration`` and then laid over the base slot by slot: a slot
the fragment sets replaces the base value, an unset slot keeps it. Slot values
are atomic, so a headers override replaces the base headers entirely.
"""

from collections.abc import Callable
from dataclasses import fields
from typing import Any, TypeAlias

from service_client_core.config.models import AsyncConfiguration, AsyncConfigurationBuilder

Configurator: TypeAlias = Callable[[AsyncConfigurationBuilder], Any]
ConfigurationFragment: TypeAlias = AsyncConfiguration | Configurator


def normalize(fragment: ConfigurationFragment, base: AsyncConfiguration | None = None) -> AsyncConfiguration:
    """Turn either fragment form into an AsyncConfiguration.

    A configurator runs against a fresh builder seeded from ``base`` so it can
    read the values it is about to override.
    """
    if isinstance(fragment, AsyncConfiguration):
        return fragment
    if not callable(fragment):
        raise TypeError(f"Expected AsyncConfiguration or a configurator callable, got {type(fragment).__name__}")

    builder = base.to_builder() if base is not None else AsyncConfiguration.builder()
    return builder.apply(fragment).build()


def compose(base: AsyncConfiguration, fragment: ConfigurationFragment) -> AsyncConfiguration:
    """Lay ``fragment`` over ``base``; later wins, unset slots inherit."""
    override = normalize(fragment, base)
    merged = {}
    for slot in fields(AsyncConfiguration):
        value = getattr(override, slot.name)
        merged[slot.name] = getattr(base, slot.name) if value is None else value
    return AsyncConfiguration(**merged)
