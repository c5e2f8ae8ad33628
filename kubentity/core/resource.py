import enum
from typing import NamedTuple, Optional
from dataclasses import dataclass

from .exceptions import ConfigurationError


class EntityScope(enum.Enum):
    NAMESPACED = 'Namespaced'
    CLUSTER = 'Cluster'


class ResourceDescriptor(NamedTuple):
    """Wire identity of a resource type"""
    kind: str
    list_kind: str
    group: str
    version: str
    singular: str
    plural: str
    scope: EntityScope = EntityScope.NAMESPACED

    @property
    def api_version(self):
        return f"{self.group}/{self.version}" if self.group else self.version


@dataclass(frozen=True)
class EntityInfo:
    """Static declaration attached to a resource class by `entity()`"""
    group: str
    version: str
    kind: Optional[str] = None
    plural: Optional[str] = None
    scope: EntityScope = EntityScope.NAMESPACED


class Resource:
    _entity_info: EntityInfo = None


def entity(group: str = "", version: str = "v1", kind: str = None, plural: str = None,
           scope: EntityScope = EntityScope.NAMESPACED):
    """Class decorator declaring the API identity of a resource class.

    **parameters**

    * **group** - API group of the resource. Use `""` for the core group.
    * **version** - API group version. Example `v1`.
    * **kind** - Resource kind. When not set the class name is used.
    * **plural** - Resource collection name. When not set `lower(kind) + "s"` is used.
    * **scope** - `EntityScope.NAMESPACED` (default) or `EntityScope.CLUSTER`.
    """
    info = EntityInfo(group=group, version=version, kind=kind, plural=plural, scope=scope)

    def decorator(cls):
        cls._entity_info = info
        # imported here as the registry depends on this module
        from .resource_registry import resource_registry
        return resource_registry.register(cls)

    return decorator


def resource_class(res) -> type:
    return res if isinstance(res, type) else type(res)


def entity_info(res) -> EntityInfo:
    cls = resource_class(res)
    info = getattr(cls, '_entity_info', None)
    if info is None:
        raise ConfigurationError(f"Type {cls.__name__} does not have an entity declaration")
    return info


def build_descriptor(res) -> ResourceDescriptor:
    """Derive the `ResourceDescriptor` of a resource class (or instance) from its declaration"""
    cls = resource_class(res)
    info = entity_info(cls)
    if not info.version:
        raise ConfigurationError(f"Type {cls.__name__} does not declare an API version")
    kind = info.kind if info.kind and info.kind.strip() else cls.__name__
    singular = kind.lower()
    plural = info.plural if info.plural and info.plural.strip() else f"{singular}s"
    return ResourceDescriptor(
        kind=kind,
        list_kind=f"{kind}List",
        group=info.group or "",
        version=info.version,
        singular=singular,
        plural=plural,
        scope=info.scope,
    )


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()
