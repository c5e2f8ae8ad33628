from typing import Dict, Optional, Tuple, Type

from . import resource as res
from .exceptions import LoadResourceError


class ResourceRegistry:
    """Resource Registry used to resolve resource descriptors and to map `apiVersion`/`kind` to resource classes
    """
    _registry: Dict[Tuple[str, str], type]
    _descriptors: Dict[type, res.ResourceDescriptor]

    def __init__(self):
        self._registry = {}
        self._descriptors = {}

    def register(self, resource: Type[res.Resource]) -> Type[res.Resource]:
        """Register a resource class

        **parameters**

        * **resource** - Resource class to register. The class must carry an entity declaration.

        **returns** The `resource` class provided
        """
        desc = self.resolve(resource)
        res_key = (desc.api_version, desc.kind)

        if res_key in self._registry:
            registered_resource = self._registry[res_key]
            if registered_resource is resource:   # already present
                return registered_resource
            raise ValueError(f"Another class for resource '{desc.kind}' is already registered")

        self._registry[res_key] = resource
        return resource

    def clear(self):
        """Clear the registry from all registered resources
        """
        self._registry.clear()
        self._descriptors.clear()

    def get(self, version: str, kind: str) -> Optional[Type[res.Resource]]:
        """Get a resource from the registry matching the given `version` and `kind`.

        **parameters**

        * **version** - Version of the resource as defined in the kubernetes definition. Example `example.com/v1`
        * **kind** - Resource kind. Example `CronTab`

        **returns** A `resource` class or `None` if there is no match in the registry.
        """
        return self._registry.get((version, kind))

    def load(self, version: str, kind: str) -> Type[res.Resource]:
        """Same as `get`, but raise `LoadResourceError` when the resource is not registered.
        """
        resource = self.get(version, kind)
        if resource is None:
            raise LoadResourceError(f"Cannot find resource {kind} of group {version}. "
                                    "Ensure the resource class is declared with @entity "
                                    "or a generic resource is defined.")
        return resource

    def resolve(self, resource) -> res.ResourceDescriptor:
        """Return the `ResourceDescriptor` of a resource class or instance.
        Raise `ConfigurationError` if the class has no entity declaration.
        """
        cls = res.resource_class(resource)
        try:
            return self._descriptors[cls]
        except KeyError:
            desc = self._descriptors[cls] = res.build_descriptor(cls)
            return desc


resource_registry = ResourceRegistry()


def resolve(resource) -> res.ResourceDescriptor:
    """Return the `ResourceDescriptor` of a resource class or instance"""
    return resource_registry.resolve(resource)
