from typing import Type, Optional, overload

from .core import resource as res
from .core.resource_registry import resource_registry
from .models import meta_v1


__all__ = [
    'create_global_resource',
    'create_namespaced_resource',
    'get_generic_resource',
    'Generic',
]


class Generic(dict):
    """Resource stored as a plain dictionary, used for kinds without a dedicated dataclass"""
    @overload
    def __init__(self, apiVersion: str = None, kind: str = None,
                 metadata: meta_v1.ObjectMeta = None, **kwargs):
        pass

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

    @property
    def apiVersion(self) -> str:
        return self.get('apiVersion')

    @property
    def kind(self) -> str:
        return self.get('kind')

    @property
    def metadata(self) -> Optional[meta_v1.ObjectMeta]:
        meta = self.get('metadata')
        if meta is None or isinstance(meta, meta_v1.ObjectMeta):
            return meta
        # keep the decoded instance so that changes are visible in to_dict()
        meta = self['metadata'] = meta_v1.ObjectMeta.from_dict(meta)
        return meta

    @metadata.setter
    def metadata(self, value: meta_v1.ObjectMeta):
        self['metadata'] = value

    def __getattr__(self, item):
        if item.startswith("_"):
            raise AttributeError(f"{item} not found")
        return self.get(item)

    @classmethod
    def from_dict(cls, d: dict, lazy=True):
        return cls(d)

    def to_dict(self, dict_factory=dict):
        d = dict_factory(self)
        if 'metadata' in d and isinstance(d['metadata'], meta_v1.ObjectMeta):
            d['metadata'] = d['metadata'].to_dict(dict_factory)
        return d


class GenericGlobalResource(res.Resource, Generic):
    pass


class GenericNamespacedResource(res.Resource, Generic):
    pass


def get_generic_resource(version, kind) -> Optional[Type[Generic]]:
    """Query generic resources already defined with `create_global_resource` or `create_namespaced_resource`

    **Parameters**

    * **version** `str` - Resource version including the API group. Example `stable.example.com/v1`
    * **kind** `str` - Resource kind. Example: `CronTab`

    **returns** class representing the generic resource or `None` if it's not found
    """
    model = resource_registry.get(version, kind)
    if model is not None and issubclass(model, Generic):
        return model
    return None


def _create_resource(scope, group, version, kind, plural) -> Type[Generic]:
    api_version = f'{group}/{version}' if group else version
    main = GenericNamespacedResource if scope is res.EntityScope.NAMESPACED else GenericGlobalResource
    model = resource_registry.get(api_version, kind)
    if model is not None:
        desc = resource_registry.resolve(model)
        if not issubclass(model, main) or desc.plural != plural:
            raise ValueError(f"Resource {kind} already created but with different signature")
        return model

    class TmpName(main):
        pass

    TmpName.__name__ = TmpName.__qualname__ = kind
    return res.entity(group=group, version=version, kind=kind, plural=plural, scope=scope)(TmpName)


def create_global_resource(group: str, version: str, kind: str, plural: str) -> Type[GenericGlobalResource]:
    """Create a new class representing a global resource with the provided group, version and names.

    **Parameters**

    * **group** `str` - API group of the resource. Example `stable.example.com`.
    * **version** `str` - API group version. Example `v1`.
    * **kind** `str` - Resource name. Example `Job`.
    * **plural** `str` - Resource collection name. Example `jobs`.

    **returns**  Subclass of `GenericGlobalResource`.
    """
    return _create_resource(res.EntityScope.CLUSTER, group, version, kind, plural)


def create_namespaced_resource(group: str, version: str, kind: str, plural: str) \
        -> Type[GenericNamespacedResource]:
    """Create a new class representing a namespaced resource with the provided group, version and names.

    **Parameters**

    * **group** `str` - API group of the resource. Example `stable.example.com`.
    * **version** `str` - API group version. Example `v1`.
    * **kind** `str` - Resource name. Example `Job`.
    * **plural** `str` - Resource collection name. Example `jobs`.

    **returns**  Subclass of `GenericNamespacedResource`.
    """
    return _create_resource(res.EntityScope.NAMESPACED, group, version, kind, plural)
