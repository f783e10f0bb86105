"""Capability registry.

The registry is an explicit registration table: capability id (and alternate
function name) → capability class. Capability classes carry their own
``CapabilityDescriptor`` and act as the instance factory.

The invoker uses this registry to turn an identifier into a fresh, single-use
capability instance.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

from ..errors import CapabilityNotFoundError
from ..schemas.domain import CapabilityDescriptor
from .base import Capability

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    In-memory mapping of capability ids and function names to capability classes.

    Notes:
        - ``register`` overwrites any existing mapping for the same capability id.
        - A function name may only belong to one capability id.
        - ``get`` raises ``KeyError``; the instance factories raise
          ``CapabilityNotFoundError``.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[str, Type[Capability]] = {}
        self._by_function_name: Dict[str, str] = {}

    def register(self, cap: Type[Capability]) -> None:
        """
        Register a capability class.

        Args:
            cap: The capability class to register. It must expose a ``descriptor`` attribute.

        Raises:
            ValueError: If the function name is already registered for another id.
        """
        descriptor = cap.descriptor
        owner = self._by_function_name.get(descriptor.function_name)
        if owner is not None and owner != descriptor.id:
            raise ValueError(
                f"function name '{descriptor.function_name}' is already registered for '{owner}'"
            )
        previous = self._caps.get(descriptor.id)
        if previous is not None:
            self._by_function_name.pop(previous.descriptor.function_name, None)
        self._caps[descriptor.id] = cap
        self._by_function_name[descriptor.function_name] = descriptor.id
        logger.debug(f"Registered capability '{descriptor.id}' ({descriptor.function_name})")

    def get(self, capability_id: str) -> Type[Capability]:
        """
        Retrieve a registered capability class by id.

        Raises:
            KeyError: If no capability is registered with the given id.
        """
        return self._caps[capability_id]

    def has(self, capability_id: str) -> bool:
        return capability_id in self._caps

    def create_instance(self, capability_id: str) -> Capability:
        """Create a fresh instance of the capability registered under ``capability_id``."""
        try:
            cap = self._caps[capability_id]
        except KeyError as e:
            raise CapabilityNotFoundError(capability_id) from e
        return cap()

    def create_from_function_name(self, function_name: str) -> Capability:
        """Create a fresh instance of the capability exposing ``function_name``."""
        capability_id = self._by_function_name.get(function_name)
        if capability_id is None:
            raise CapabilityNotFoundError(function_name)
        return self._caps[capability_id]()

    def instantiate(self, identifier: str) -> Capability:
        """Create an instance by id first, then by function name."""
        try:
            return self.create_instance(identifier)
        except CapabilityNotFoundError:
            return self.create_from_function_name(identifier)

    def describe(self, identifier: str) -> CapabilityDescriptor:
        """Return the descriptor for an id or function name."""
        capability_id = identifier if identifier in self._caps else self._by_function_name.get(identifier)
        if capability_id is None:
            raise CapabilityNotFoundError(identifier)
        return self._caps[capability_id].descriptor

    def definitions(self, group: Optional[str] = None) -> List[CapabilityDescriptor]:
        """List descriptors in registration order, optionally filtered by group."""
        return [
            cap.descriptor for cap in self._caps.values() if group is None or cap.descriptor.group == group
        ]
