from datetime import datetime
from typing import Dict, List

from ..core.schema import dataclass, DictMixin


@dataclass
class OwnerReference(DictMixin):
    """OwnerReference contains enough information to let you identify an owning object.

    **parameters**

    * **apiVersion** `str` - API version of the referent.
    * **kind** `str` - Kind of the referent.
    * **name** `str` - Name of the referent.
    * **uid** `str` - UID of the referent.
    * **blockOwnerDeletion** `bool` - *(optional)* If true, the owner cannot be deleted before this reference
      is removed.
    * **controller** `bool` - *(optional)* If true, this reference points to the managing controller.
    """
    apiVersion: str
    kind: str
    name: str
    uid: str
    blockOwnerDeletion: bool = None
    controller: bool = None


@dataclass
class ObjectMeta(DictMixin):
    """Metadata that all persisted resources must have.

    **parameters**

    * **annotations** `Dict[str, str]` - *(optional)* Unstructured key value map set by external tools.
    * **creationTimestamp** `datetime` - *(optional)* Set by the server when the object is created.
    * **deletionGracePeriodSeconds** `int` - *(optional)* Seconds allowed for graceful termination.
    * **deletionTimestamp** `datetime` - *(optional)* Date and time at which the object will be deleted.
    * **finalizers** `List[str]` - *(optional)* Finalizers that must be empty before the object is deleted.
    * **generateName** `str` - *(optional)* Prefix used by the server to generate a unique name.
    * **generation** `int` - *(optional)* Sequence number representing a specific generation of the desired state.
    * **labels** `Dict[str, str]` - *(optional)* Map of string keys and values used to select objects.
    * **name** `str` - *(optional)* Name of the object, unique within a namespace.
    * **namespace** `str` - *(optional)* Namespace of the object. Empty for cluster scoped objects.
    * **ownerReferences** `List[OwnerReference]` - *(optional)* Objects depended by this object.
    * **resourceVersion** `str` - *(optional)* Opaque value representing the internal version of this object,
      used for optimistic concurrency.
    * **uid** `str` - *(optional)* Unique identifier assigned by the server.
    """
    annotations: Dict[str, str] = None
    creationTimestamp: datetime = None
    deletionGracePeriodSeconds: int = None
    deletionTimestamp: datetime = None
    finalizers: List[str] = None
    generateName: str = None
    generation: int = None
    labels: Dict[str, str] = None
    name: str = None
    namespace: str = None
    ownerReferences: List[OwnerReference] = None
    resourceVersion: str = None
    uid: str = None


@dataclass
class ListMeta(DictMixin):
    """Metadata of a list response.

    **parameters**

    * **continue_** `str` - *(optional)* Set when more results are available. Send it back as `continue`
      to retrieve the next chunk.
    * **remainingItemCount** `int` - *(optional)* Number of items not included in this response.
    * **resourceVersion** `str` - *(optional)* Version of the collection at which the list was built.
    """
    continue_: str = None
    remainingItemCount: int = None
    resourceVersion: str = None


@dataclass
class StatusCause(DictMixin):
    field: str = None
    message: str = None
    reason: str = None


@dataclass
class StatusDetails(DictMixin):
    causes: List[StatusCause] = None
    group: str = None
    kind: str = None
    name: str = None
    retryAfterSeconds: int = None
    uid: str = None


@dataclass
class Status(DictMixin):
    """Status is a return value for calls that don't return other objects, and the payload of API errors.

    **parameters**

    * **code** `int` - *(optional)* Suggested HTTP return code for this status.
    * **details** `StatusDetails` - *(optional)* Extended data associated with the reason.
    * **message** `str` - *(optional)* A human-readable description of the status of this operation.
    * **metadata** `ListMeta` - *(optional)* Standard list metadata.
    * **reason** `str` - *(optional)* Machine-readable description of why this operation is in the "Failure"
      status. Examples `NotFound`, `Conflict`, `AlreadyExists`.
    * **status** `str` - *(optional)* `Success` or `Failure`.
    """
    apiVersion: str = None
    code: int = None
    details: StatusDetails = None
    kind: str = None
    message: str = None
    metadata: ListMeta = None
    reason: str = None
    status: str = None
