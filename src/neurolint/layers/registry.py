"""Layer registry and execution-order resolution.

The registry maps every :class:`LayerId` to exactly one
:class:`LayerDescriptor`.  It is immutable: substituting a layer (for
instance a stub in tests) goes through :meth:`LayerRegistry.with_layer`,
which returns a new registry and leaves the original untouched.

Only members of the closed :class:`LayerId` enum can be registered, so the
ascending-id execution order is fixed by the enum definition rather than by
whatever happens to be registered at runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from neurolint.domain.enums import LayerId
from neurolint.domain.values import LayerDescriptor

from . import app_router, components, configuration, entity_cleanup, hydration

logger = logging.getLogger(__name__)


class LayerRegistry:
    """Lookup table of layer descriptors keyed by :class:`LayerId`.

    Usage::

        registry = LayerRegistry.default()
        for layer in registry.resolve_order([4, 1, 4, 99]):
            ...  # layer 1, then layer 4

    Parameters
    ----------
    descriptors:
        One descriptor per :class:`LayerId`.  Missing or extra ids raise
        ``ValueError``.
    """

    def __init__(self, descriptors: Iterable[LayerDescriptor]) -> None:
        layers: dict[LayerId, LayerDescriptor] = {}
        for descriptor in descriptors:
            layer_id = LayerId(descriptor.id)
            if layer_id in layers:
                raise ValueError(f"Layer {int(layer_id)} is already registered")
            layers[layer_id] = descriptor
        missing = set(LayerId) - set(layers)
        if missing:
            raise ValueError(
                f"Registry is missing layers: {sorted(int(m) for m in missing)}"
            )
        self._layers: Mapping[LayerId, LayerDescriptor] = dict(sorted(layers.items()))

    @classmethod
    def default(cls) -> LayerRegistry:
        """Registry wired to the built-in layer implementations."""
        return cls(
            LayerDescriptor(
                id=module.LAYER_ID,
                name=module.NAME,
                description=module.DESCRIPTION,
                transform=module.transform,
            )
            for module in (configuration, entity_cleanup, components, hydration, app_router)
        )

    # ------------------------------------------------------------------ #
    #  Lookup                                                              #
    # ------------------------------------------------------------------ #

    def get(self, layer_id: int) -> LayerDescriptor:
        """Return the descriptor for *layer_id*.

        Raises ``KeyError`` if the id is not a known layer.
        """
        try:
            return self._layers[LayerId(layer_id)]
        except ValueError:
            raise KeyError(
                f"Layer {layer_id!r} is not registered. "
                f"Available: {[int(i) for i in self._layers]}"
            ) from None

    def has(self, layer_id: int) -> bool:
        try:
            LayerId(layer_id)
        except ValueError:
            return False
        return True

    @property
    def execution_order(self) -> tuple[LayerDescriptor, ...]:
        """Every descriptor, ascending by id."""
        return tuple(self._layers.values())

    def resolve_order(self, requested_ids: Iterable[int]) -> tuple[LayerDescriptor, ...]:
        """Map requested ids to descriptors in canonical execution order.

        Duplicates collapse, unknown ids are dropped, and the result is
        sorted ascending by id regardless of the order given.
        """
        known: set[LayerId] = set()
        for raw in requested_ids:
            if self.has(raw):
                known.add(LayerId(raw))
            else:
                logger.debug("Ignoring unknown layer id %r", raw)
        return tuple(self._layers[layer_id] for layer_id in sorted(known))

    # ------------------------------------------------------------------ #
    #  Substitution                                                        #
    # ------------------------------------------------------------------ #

    def with_layer(self, descriptor: LayerDescriptor) -> LayerRegistry:
        """Return a copy of this registry with one layer replaced."""
        layer_id = LayerId(descriptor.id)
        replaced = [d for d in self._layers.values() if d.id != layer_id]
        replaced.append(descriptor)
        return LayerRegistry(replaced)

    # ------------------------------------------------------------------ #
    #  Dunder helpers                                                      #
    # ------------------------------------------------------------------ #

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self):
        return iter(self._layers.values())

    def __contains__(self, layer_id: object) -> bool:
        return isinstance(layer_id, int) and self.has(layer_id)

    def __repr__(self) -> str:
        names = ", ".join(f"{int(i)}:{d.name}" for i, d in self._layers.items())
        return f"<LayerRegistry [{names}]>"


DEFAULT_REGISTRY = LayerRegistry.default()

LAYER_EXECUTION_ORDER: tuple[LayerDescriptor, ...] = DEFAULT_REGISTRY.execution_order
"""All built-in layers in execution order, for layer pickers."""

DETECTORS = (
    configuration.DETECTORS
    + entity_cleanup.DETECTORS
    + components.DETECTORS
    + hydration.DETECTORS
    + app_router.DETECTORS
)
"""The analyzer's fixed detector battery, grouped by the layer that fixes each issue."""


def resolve_order(requested_ids: Iterable[int]) -> tuple[LayerDescriptor, ...]:
    """Resolve *requested_ids* against the built-in registry."""
    return DEFAULT_REGISTRY.resolve_order(requested_ids)
