from .core.client import Client
from .core.async_client import AsyncClient
from .core.exceptions import (
    ApiError, ConfigurationError, ConflictError, DeserializationError, LoadResourceError,
    NotFoundError, StreamError, TransportError
)
from .core.resource import EntityScope, ResourceDescriptor, entity
from .core.resource_registry import resolve, resource_registry
from .core.watch import Watcher, AsyncWatcher
from .config.kubeconfig import KubeConfig, SingleConfig
from .selectors import EqualsSelector, NotEqualsSelector, ExistsSelector, NotExistsSelector
from .types import WatchEvent, WatchEventType, WatchState

__all__ = [
    "Client",
    "AsyncClient",
    "ApiError",
    "ConfigurationError",
    "ConflictError",
    "DeserializationError",
    "LoadResourceError",
    "NotFoundError",
    "StreamError",
    "TransportError",
    "EntityScope",
    "ResourceDescriptor",
    "entity",
    "resolve",
    "resource_registry",
    "Watcher",
    "AsyncWatcher",
    "KubeConfig",
    "SingleConfig",
    "EqualsSelector",
    "NotEqualsSelector",
    "ExistsSelector",
    "NotExistsSelector",
    "WatchEvent",
    "WatchEventType",
    "WatchState",
]
