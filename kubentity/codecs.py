from typing import Union, TextIO, List

import yaml

from .core.exceptions import DeserializationError, LoadResourceError
from .core.resource import Resource
from .core.resource_registry import resource_registry
from .resources import core_v1  # noqa: F401 (registers the bundled resources)

REQUIRED_ATTR = ('apiVersion', 'kind')


def from_dict(d: dict, lazy=True) -> Resource:
    """Converts a resource defined as python dict to the corresponding resource object.
    The resource type is looked up in the resource registry by `apiVersion` and `kind`: classes declared with
    `@entity` and generic resources are registered automatically.
    Returns the resource object or raise a `LoadResourceError`.

    **parameters**

    * **d** - A dictionary representing a resource. Keys `apiVersion` and `kind` are always required.
    * **lazy** - Decode nested attributes only when accessed.
    """
    if not isinstance(d, dict):
        raise LoadResourceError(f"Invalid resource definition, expected a mapping, got {type(d).__name__}")
    for attr in REQUIRED_ATTR:
        if attr not in d:
            raise LoadResourceError(f"Invalid resource definition, key '{attr}' missing.")

    model = resource_registry.load(d['apiVersion'], d['kind'])
    try:
        return model.from_dict(d, lazy=lazy)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Unable to decode {d['kind']}: {e}") from e


def load_all_yaml(stream: Union[str, TextIO]) -> List[Resource]:
    """Load resource objects defined as YAML. See `from_dict` regarding how resource types are detected.
    Returns a list of resource objects or raise a `LoadResourceError`. Empty YAML documents are skipped.

    **parameters**

    * **stream** - A file-like object or a string representing a yaml file.
    """
    return [from_dict(obj) for obj in yaml.safe_load_all(stream) if obj is not None]


def dump_all_yaml(resources: List[Resource], stream: TextIO = None, indent=2):
    """Write resource objects as YAML into an open file.

    **parameters**

    * **resources** - List of resources to write on the file
    * **stream** - Open file where to write the resources. When not set the content is returned
      as a string.
    * **indent** - Number of characters for indenting nested blocks.
    """
    res = [r.to_dict() for r in resources]
    return yaml.safe_dump_all(res, stream, indent=indent)
