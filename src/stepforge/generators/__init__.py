"""Built-in domain generator modules.

Each module exposes ``register_steps(registry)``. The order of
``BUILTIN_MODULES`` is the match priority across modules.
"""

from __future__ import annotations

from stepforge.generators import interaction, navigation, network, session, store
from stepforge.registry import PatternRegistry

BUILTIN_MODULES = (interaction, navigation, network, session, store)


def register_builtin_steps(registry: PatternRegistry) -> None:
    """Register every built-in pattern in the fixed module order."""
    for module in BUILTIN_MODULES:
        module.register_steps(registry)
