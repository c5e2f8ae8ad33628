from typing import Dict, List

from ..core.schema import dataclass, DictMixin
from ..core.resource import Resource, EntityScope, entity
from ..models.meta_v1 import ObjectMeta


@entity(group="", version="v1", kind="ConfigMap")
@dataclass
class ConfigMap(Resource, DictMixin):
    """ConfigMap holds configuration data for pods to consume.

    **parameters**

    * **apiVersion** `str` - *(optional)* Versioned schema of this representation of an object.
    * **binaryData** `Dict[str, str]` - *(optional)* Base64 encoded binary data.
    * **data** `Dict[str, str]` - *(optional)* Configuration data.
    * **immutable** `bool` - *(optional)* If set to true, the data can't be updated.
    * **kind** `str` - *(optional)* Kind of the object.
    * **metadata** `ObjectMeta` - *(optional)* Standard object's metadata.
    """
    apiVersion: str = None
    binaryData: Dict[str, str] = None
    data: Dict[str, str] = None
    immutable: bool = None
    kind: str = None
    metadata: ObjectMeta = None


@entity(group="", version="v1", kind="Secret")
@dataclass
class Secret(Resource, DictMixin):
    """Secret holds secret data of a certain type.

    **parameters**

    * **apiVersion** `str` - *(optional)* Versioned schema of this representation of an object.
    * **data** `Dict[str, str]` - *(optional)* Base64 encoded secret data.
    * **immutable** `bool` - *(optional)* If set to true, the data can't be updated.
    * **kind** `str` - *(optional)* Kind of the object.
    * **metadata** `ObjectMeta` - *(optional)* Standard object's metadata.
    * **stringData** `Dict[str, str]` - *(optional)* Write-only plain text data, merged into `data` by the server.
    * **type** `str` - *(optional)* Used to facilitate programmatic handling of secret data.
    """
    apiVersion: str = None
    data: Dict[str, str] = None
    immutable: bool = None
    kind: str = None
    metadata: ObjectMeta = None
    stringData: Dict[str, str] = None
    type: str = None


@dataclass
class NamespaceSpec(DictMixin):
    finalizers: List[str] = None


@dataclass
class NamespaceStatus(DictMixin):
    phase: str = None


@entity(group="", version="v1", kind="Namespace", scope=EntityScope.CLUSTER)
@dataclass
class Namespace(Resource, DictMixin):
    """Namespace provides a scope for names.

    **parameters**

    * **apiVersion** `str` - *(optional)* Versioned schema of this representation of an object.
    * **kind** `str` - *(optional)* Kind of the object.
    * **metadata** `ObjectMeta` - *(optional)* Standard object's metadata.
    * **spec** `NamespaceSpec` - *(optional)* Behavior of the Namespace.
    * **status** `NamespaceStatus` - *(optional)* Current status of the Namespace, updated through the
      `status` subresource.
    """
    apiVersion: str = None
    kind: str = None
    metadata: ObjectMeta = None
    spec: NamespaceSpec = None
    status: NamespaceStatus = None
