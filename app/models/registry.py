"""
DeviceRegistry - maps SPICE identifier letters to device prototypes.

The registry is an explicit value handed to the parser; it never hands out
its prototypes, only clones of them.
"""

import logging
from typing import Optional

from .device import SPICE_DEVICE_CLASSES, Device

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Prototype registry keyed by the upper-case SPICE letter."""

    def __init__(self):
        self._prototypes: dict[str, Device] = {}

    @classmethod
    def with_default_devices(cls) -> "DeviceRegistry":
        """Return a registry holding every built-in SPICE device."""
        registry = cls()
        for device_class in SPICE_DEVICE_CLASSES:
            registry.register(device_class())
        return registry

    def register(self, prototype: Device) -> None:
        """Register *prototype* under its SPICE letter."""
        identifier = prototype.spice_id.upper()
        if len(identifier) != 1:
            raise ValueError(f"{type(prototype).__name__} has no single-letter SPICE identifier")
        if identifier in self._prototypes:
            logger.warning(
                "Replacing %s registered for '%s' with %s",
                type(self._prototypes[identifier]).__name__,
                identifier,
                type(prototype).__name__,
            )
        self._prototypes[identifier] = prototype

    def create(self, identifier: str) -> Optional[Device]:
        """Return a fresh device for the SPICE letter *identifier*, or None if unknown."""
        prototype = self._prototypes.get(identifier.upper())
        if prototype is None:
            return None
        return prototype.clone()

    def identifiers(self) -> list[str]:
        return sorted(self._prototypes)

    def __contains__(self, identifier: str) -> bool:
        return identifier.upper() in self._prototypes

    def __len__(self) -> int:
        return len(self._prototypes)
