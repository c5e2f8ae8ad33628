import asyncio
from typing import Iterable, List, Optional, Type, Union

import httpx

from ..config.kubeconfig import SingleConfig, KubeConfig
from ..config.namespace import POD_NAMESPACE_ENV, current_namespace
from ..core import resource as r
from ..models.version import VersionInfo
from ..types import OnCloseHandler, OnErrorHandler, OnEventHandler
from .client import Resource, Timeout, delete_target, first_failure
from .exceptions import DeserializationError
from .generic_client import GenericAsyncClient
from .selector import Selectors
from .watch import AsyncWatcher


class AsyncClient:
    """Create a new kubentity client

    Parameters:
      config: Instance of `SingleConfig` or `KubeConfig`. When a `KubeConfig` is given, its current
        context is used.
      namespace: Namespace this client is configured for. It is only used by `current_namespace()`, calls always
        select the namespace explicitly.
      timeout: Instance of `httpx.Timeout`. By default all timeouts are set to 10 seconds. Notice that read timeout
        is ignored when watching changes.
      lazy: When set, the returned objects will be decoded from the JSON payload in a lazy way, i.e. only when
        accessed.
      trust_env: Passed through to httpx.AsyncClient trust_env. See its docs for further description.
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
        transport: httpx.AsyncBaseTransport = None,
        proxy: str = None,
    ):
        self._client = GenericAsyncClient(
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
        """Return the namespace the current process runs in. See `Client.current_namespace`"""
        return current_namespace(self.namespace, env_var=env_var)

    async def get(self, res: Type[Resource], name: str, *, namespace: str = None) -> Optional[Resource]:
        """Return an object or `None` if the object doesn't exist.

        Parameters:
          res: Resource kind.
          name: Name of the object to fetch.
          namespace: Name of the namespace containing the object. When not set, the cluster wide endpoint is used.
        """
        return await self._client.request_or_none("get", res=res, name=name, namespace=namespace)

    async def list(
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
          labels: Limit the returned objects by labels.
          chunk_size: Limit the amount of objects returned for each rest API call.
              This method will automatically execute all subsequent calls until no more data is available.
        """
        br = self._client.list_request(res, namespace=namespace, labels=labels, chunk_size=chunk_size)
        return await self._client.list(br)

    async def create(self, obj: Resource) -> Resource:
        """Creates a new object. The namespace is taken from the object metadata."""
        return await self._client.request("post", obj=obj)

    async def update(self, obj: Resource) -> Resource:
        """Replace an existing object. Raise `kubentity.ConflictError` if `metadata.resourceVersion`
        doesn't match the version stored on the server.
        """
        return await self._client.request("put", obj=obj)

    async def save(self, obj: Resource) -> Resource:
        """Create the object if it doesn't exist, otherwise replace it. See `Client.save`"""
        meta = obj.metadata
        current = await self.get(type(obj), meta.name, namespace=meta.namespace)
        if current is None:
            return await self.create(obj)
        meta.uid = current.metadata.uid
        meta.resourceVersion = current.metadata.resourceVersion
        return await self.update(obj)

    async def update_status(self, obj: Resource) -> None:
        """Replace the status of an existing object. Only `metadata.resourceVersion` of `obj` is updated."""
        result = await self._client.request("put", obj=obj, subresource="status")
        if result.metadata is None:
            raise DeserializationError("Could not parse result, metadata missing")
        obj.metadata.resourceVersion = result.metadata.resourceVersion

    async def delete(self, res, name: str = None, *, namespace: str = None) -> None:
        """Delete an object. Nothing happens if the object doesn't exist.

        Parameters:
          res: Resource kind, an object instance or an iterable of object instances.
          name: Name of the object to delete (only when `res` is a resource kind).
          namespace: Name of the namespace containing the object.
        """
        if not isinstance(res, (type, r.Resource)):
            return await self.delete_many(res)
        res, name, namespace = delete_target(res, name, namespace)
        await self._client.request_or_none("delete", res=res, name=name, namespace=namespace)

    async def delete_many(self, objs: Iterable[Resource]) -> None:
        """Delete several objects concurrently. See `Client.delete_many`"""
        objs = list(objs)
        results = await asyncio.gather(*(self.delete(obj) for obj in objs), return_exceptions=True)
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
    ) -> AsyncWatcher:
        """Watch changes to objects

        When `on_event` is provided, the stream is read in a background task (this requires a running event loop).
        Otherwise the returned watcher can be iterated with `async for` to receive the events.
        See `Client.watch` for the description of the parameters.
        """
        br = self._client.watch_request(
            res, timeout, namespace=namespace, labels=labels, resource_version=resource_version
        )
        watcher = self._client.watch(br, on_event=on_event, on_error=on_error, on_close=on_close)
        if on_event is not None:
            watcher.start()
        return watcher

    async def server_version(self) -> VersionInfo:
        """Return the version of the API server"""
        return VersionInfo.from_dict(await self._client.get_json("version"), lazy=False)

    async def close(self):
        """Close the underline httpx client"""
        await self._client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
