import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from typing import Iterable, List, Optional, Type, TypeVar, Union

import httpx

from ..config.kubeconfig import SingleConfig, KubeConfig
from ..config.namespace import POD_NAMESPACE_ENV, current_namespace
from ..core import resource as r
from ..models.version import VersionInfo
from ..types import OnCloseHandler, OnErrorHandler, OnEventHandler
from .exceptions import DeserializationError
from .generic_client import GenericSyncClient
from .selector import Selectors
from .watch import Watcher

logger = logging.getLogger(__name__)

Resource = TypeVar("Resource", bound=r.Resource)
Timeout = Union[int, float, timedelta]


def delete_target(res, name, namespace):
    """Return `(resource class, name, namespace)` of a delete call accepting either a class or an instance"""
    if isinstance(res, type):
        return res, name, namespace
    if name is not None:
        raise ValueError("name can't be provided together with an object instance")
    meta = res.metadata
    if meta is None:
        raise ValueError("object metadata not defined")
    return type(res), meta.name, namespace if namespace is not None else meta.namespace


def first_failure(objs: list, results: list) -> Optional[Exception]:
    """Log all failures of a batch and return the first one in input order"""
    errors = [(obj, res) for obj, res in zip(objs, results) if isinstance(res, Exception)]
    for obj, err in errors[1:]:
        logger.error("Failed to delete %s %s: %s", type(obj).__name__, obj.metadata.name, err)
    return errors[0][1] if errors else None


class Client:
    """Create a new kubentity client

    Parameters:
      config: Instance of `SingleConfig` or `KubeConfig`. When a `KubeConfig` is given, its current
        context is used.
      namespace: Namespace this client is configured for. It is only used by `current_namespace()`, calls always
        select the namespace explicitly.
      timeout: Instance of `httpx.Timeout`. By default, all timeouts are set to 10 seconds. Notice that read timeout
        is ignored when watching changes.
      lazy: When set, the returned objects will be decoded from the JSON payload in a lazy way, i.e. only when
        accessed.
      trust_env: Passed through to httpx.Client trust_env. See its docs for further description.
      transport: Custom httpx transport.
      proxy: HTTP proxy for the httpx client.
    """

    def __init__(
        self,
        config: Union[SingleConfig, KubeConfig],
        namespace: str = None,
        timeout: httpx.Timeout = None,
        lazy=True,
        trust_env: bool = True,
        transport: httpx.BaseTransport = None,
        proxy: str = None,
    ):
        self._client = GenericSyncClient(
            config,
            namespace=namespace,
            timeout=timeout,
            lazy=lazy,
            trust_env=trust_env,
            transport=transport,
            proxy=proxy,
        )

    @property
    def namespace(self) -> Optional[str]:
        """Return the namespace configured for this client, if any"""
        return self._client.namespace

    @property
    def config(self) -> SingleConfig:
        """Return the kubernetes configuration used in this client"""
        return self._client.config

    def current_namespace(self, env_var: str = POD_NAMESPACE_ENV) -> str:
        """Return the namespace the current process runs in. The environment variable `env_var` overrides
        the configured namespace and the mounted service account namespace overrides both.
        """
        return current_namespace(self.namespace, env_var=env_var)

    def get(self, res: Type[Resource], name: str, *, namespace: str = None) -> Optional[Resource]:
        """Return an object or `None` if the object doesn't exist.

        Parameters:
            res: Resource kind.
            name: Name of the object to fetch.
            namespace: Name of the namespace containing the object. When not set, the cluster wide endpoint is used.
        """
        return self._client.request_or_none("get", res=res, name=name, namespace=namespace)

    def list(
        self,
        res: Type[Resource],
        *,
        namespace: str = None,
        labels: Selectors = None,
        chunk_size: int = None,
    ) -> List[Resource]:
        """Return the list of objects matching the selection criteria.

        Parameters:
            res: resource kind.
            namespace: Name of the namespace containing the objects. When not set, objects of all namespaces
                are returned.
            labels: Limit the returned objects by labels. Either an expression, a label selector,
                a list of label selectors or a dictionary.
            chunk_size: Limit the amount of objects returned for each rest API call.
                This method will automatically execute all subsequent calls until no more data is available.
        """
        br = self._client.list_request(res, namespace=namespace, labels=labels, chunk_size=chunk_size)
        return self._client.list(br)

    def create(self, obj: Resource) -> Resource:
        """Creates a new object. The namespace is taken from the object metadata.

        Parameters:
            obj: object to create. This need to be an instance of a resource kind.
        """
        return self._client.request("post", obj=obj)

    def update(self, obj: Resource) -> Resource:
        """Replace an existing object. Raise `kubentity.ConflictError` if `metadata.resourceVersion`
        doesn't match the version stored on the server.

        Parameters:
            obj: new object. This need to be an instance of a resource kind.
        """
        return self._client.request("put", obj=obj)

    def save(self, obj: Resource) -> Resource:
        """Create the object if it doesn't exist, otherwise replace it.

        The `uid` and `resourceVersion` of the stored object are copied to `obj` before the update.
        Changes happened on the server between the two calls are overwritten.

        Parameters:
            obj: object to save. This need to be an instance of a resource kind.
        """
        meta = obj.metadata
        current = self.get(type(obj), meta.name, namespace=meta.namespace)
        if current is None:
            return self.create(obj)
        meta.uid = current.metadata.uid
        meta.resourceVersion = current.metadata.resourceVersion
        return self.update(obj)

    def update_status(self, obj: Resource) -> None:
        """Replace the status of an existing object. Only `metadata.resourceVersion` of `obj` is updated
        with the value returned by the server.

        Parameters:
            obj: object containing the new status.
        """
        result = self._client.request("put", obj=obj, subresource="status")
        if result.metadata is None:
            raise DeserializationError("Could not parse result, metadata missing")
        obj.metadata.resourceVersion = result.metadata.resourceVersion

    def delete(self, res, name: str = None, *, namespace: str = None) -> None:
        """Delete an object. Nothing happens if the object doesn't exist.

        Parameters:
            res: Resource kind, an object instance or an iterable of object instances.
            name: Name of the object to delete (only when `res` is a resource kind).
            namespace: Name of the namespace containing the object. For instances, the namespace
                in the object metadata is used when not set.
        """
        if not isinstance(res, (type, r.Resource)):
            return self.delete_many(res)
        res, name, namespace = delete_target(res, name, namespace)
        self._client.request_or_none("delete", res=res, name=name, namespace=namespace)

    def delete_many(self, objs: Iterable[Resource]) -> None:
        """Delete several objects concurrently.

        All deletions are executed even if some fail. When at least one fails, the first failure
        (in input order) is raised once all are completed; the others are logged.
        """
        objs = list(objs)
        if not objs:
            return
        with ThreadPoolExecutor(max_workers=min(len(objs), 16)) as executor:
            futures = [executor.submit(self.delete, obj) for obj in objs]
        results = [f.exception() for f in futures]
        error = first_failure(objs, results)
        if error is not None:
            raise error

    def watch(
        self,
        res: Type[Resource],
        timeout: Timeout,
        on_event: OnEventHandler = None,
        on_error: OnErrorHandler = None,
        on_close: OnCloseHandler = None,
        *,
        namespace: str = None,
        labels: Selectors = None,
        resource_version: str = None,
    ) -> Watcher:
        """Watch changes to objects

        When `on_event` is provided, the stream is read in a background thread and every event is passed to
        `on_event`. Otherwise the returned watcher can be iterated to receive the events.

        Parameters:
            res: resource kind.
            timeout: Server side timeout (seconds or `timedelta`) after which the stream is closed.
            on_event: Function called for each event.
            on_error: Function called with undecodable events and with the error ending the stream.
            on_close: Function called when the stream ends without errors.
            namespace: Name of the namespace containing the objects. When not set, objects of all
                namespaces are watched.
            labels: Limit the returned objects by labels.
            resource_version: When set, only modification events following this version will be returned.
        """
        br = self._client.watch_request(
            res, timeout, namespace=namespace, labels=labels, resource_version=resource_version
        )
        watcher = self._client.watch(br, on_event=on_event, on_error=on_error, on_close=on_close)
        if on_event is not None:
            watcher.start()
        return watcher

    def server_version(self) -> VersionInfo:
        """Return the version of the API server"""
        return VersionInfo.from_dict(self._client.get_json("version"), lazy=False)

    def close(self):
        """Close the underline httpx client"""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
