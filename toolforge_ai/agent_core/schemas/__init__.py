"""Pydantic schemas shared across the capability runtime."""

from .base import BaseSchema, FrozenSchema
from .domain import (
    CapabilityDescriptor,
    ChatMessage,
    ChatRole,
    ContextDataType,
    ContextSpec,
    Entity,
    InvocationRecord,
    Principal,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "CapabilityDescriptor",
    "ChatMessage",
    "ChatRole",
    "ContextDataType",
    "ContextSpec",
    "Entity",
    "InvocationRecord",
    "Principal",
]
