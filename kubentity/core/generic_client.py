import dataclasses
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Type, Union

import httpx

from ..config import client_adapter
from ..config.kubeconfig import KubeConfig, SingleConfig
from ..models import meta_v1
from ..types import OnCloseHandler, OnErrorHandler, OnEventHandler
from . import resource as r
from .exceptions import ConfigurationError, DeserializationError, NotFoundError, TransportError, api_error
from .resource_registry import resolve
from .schema import DictMixin
from .selector import build_selector
from .watch import AsyncWatcher, WatchDriver, Watcher

logger = logging.getLogger(__name__)


def transform_exception(e: httpx.HTTPError) -> TransportError:
    if isinstance(e, httpx.HTTPStatusError):
        return api_error(request=e.request, response=e.response)
    err = TransportError(f"{type(e).__name__}: {e}")
    err.__cause__ = e
    return err


METHOD_MAPPING = {
    "delete": "DELETE",
    "get": "GET",
    "list": "GET",
    "post": "POST",
    "put": "PUT",
    "watch": "GET",
}


@dataclass
class BasicRequest:
    method: str
    url: str
    response_type: Any
    params: Dict[str, str] = dataclasses.field(default_factory=dict)
    data: Any = None
    headers: Dict[str, str] = None


@dataclass
class EntityList(DictMixin):
    """Envelope of a list response, `items` are kept as raw dictionaries"""
    metadata: meta_v1.ListMeta = None
    items: List[dict] = None


def timeout_seconds(timeout: Union[int, float, timedelta]) -> int:
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    return int(timeout)


class GenericClient:
    AdapterClient = staticmethod(client_adapter.Client)
    WatcherType = Watcher

    def __init__(
        self,
        config: Union[SingleConfig, KubeConfig],
        namespace: str = None,
        timeout: httpx.Timeout = None,
        lazy=True,
        trust_env: bool = True,
        transport: Union[httpx.BaseTransport, httpx.AsyncBaseTransport] = None,
        proxy: str = None,
    ):
        if config is None:
            raise ConfigurationError("A client configuration is required")
        if isinstance(config, KubeConfig):
            config = config.get()

        self._timeout = httpx.Timeout(10) if timeout is None else timeout
        self._watch_timeout = httpx.Timeout(self._timeout)
        self._watch_timeout.read = None
        self._lazy = lazy
        self.config = config
        self._client = self.AdapterClient(
            config, self._timeout, trust_env=trust_env, transport=transport, proxy=proxy
        )
        self.namespace = namespace if namespace else config.namespace

    def prepare_request(
        self,
        method,
        res: Type[r.Resource] = None,
        obj=None,
        name=None,
        namespace=None,
        subresource: str = None,
        params: dict = None,
    ) -> BasicRequest:
        if params is not None:
            params = {k: v for k, v in params.items() if v is not None}
        else:
            params = {}
        data = None
        if res is None:
            if obj is None:
                raise ValueError("At least a resource or an instance of a resource need to be provided")
            res = type(obj)

        desc = resolve(res)

        if desc.group == "":
            path = ["api", desc.version]
        else:
            path = ["apis", desc.group, desc.version]

        if method in ("post", "put"):
            if obj is None:
                raise ValueError("obj is required for post or put")
            if obj.metadata is not None and namespace is None:
                namespace = obj.metadata.namespace
            data = obj.to_dict()
            # apiVersion and kind are mandatory for the API server
            data.setdefault("apiVersion", desc.api_version)
            data.setdefault("kind", desc.kind)

        # the endpoint family follows the namespace of the call, not the resource scope
        if not r.is_blank(namespace):
            path.extend(["namespaces", namespace])

        path.append(desc.plural)
        if method in ("delete", "get", "put"):
            if name is None and method == "put" and obj.metadata is not None:
                name = obj.metadata.name
            if r.is_blank(name):
                raise ValueError("resource name not defined")
            path.append(name)

        if subresource:
            path.append(subresource)

        if method == "watch":
            params["watch"] = "true"

        http_method = METHOD_MAPPING[method]
        if http_method == "DELETE":
            res = None

        return BasicRequest(
            method=http_method,
            url="/".join(path),
            params=params,
            response_type=res,
            data=data,
        )

    def list_request(self, res, namespace=None, labels=None, chunk_size: int = None) -> BasicRequest:
        return self.prepare_request(
            "list", res=res, namespace=namespace,
            params={"labelSelector": build_selector(labels) if labels else None, "limit": chunk_size}
        )

    def watch_request(self, res, timeout, namespace=None, labels=None, resource_version=None) -> BasicRequest:
        return self.prepare_request(
            "watch", res=res, namespace=namespace,
            params={
                "labelSelector": build_selector(labels) if labels else None,
                "resourceVersion": resource_version,
                "timeoutSeconds": timeout_seconds(timeout),
            }
        )

    @staticmethod
    def raise_for_status(resp):
        try:
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise transform_exception(e) from e

    def build_adapter_request(self, br: BasicRequest, timeout=None):
        kwargs = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self._client.build_request(
            br.method, br.url, params=br.params, json=br.data, headers=br.headers, **kwargs
        )

    def convert_to_resource(self, res: Type[r.Resource], item: dict) -> r.Resource:
        if not isinstance(item, dict):
            raise DeserializationError(f"Expected an object, got {type(item).__name__}")
        desc = resolve(res)
        item.setdefault("apiVersion", desc.api_version)
        item.setdefault("kind", desc.kind)
        try:
            obj = res.from_dict(item, lazy=self._lazy)
            # metadata is always decoded, a malformed object fails here and not on first access
            getattr(obj, "metadata", None)
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise DeserializationError(f"Unable to decode {desc.kind}: {e}") from e
        return obj

    @staticmethod
    def decode_json(resp: httpx.Response):
        try:
            return resp.json()
        except ValueError as e:
            raise DeserializationError(f"Response is not valid JSON: {e}") from e

    def handle_response(self, method, resp, br):
        self.raise_for_status(resp)
        res = br.response_type
        if res is None:
            return
        data = self.decode_json(resp)
        if method == "list":
            return self.handle_list(res, data, br)
        return self.convert_to_resource(res, data)

    def handle_list(self, res, data, br):
        """Decode one list chunk. Return `(continue, items)` and prepare `br` for the next chunk."""
        if not isinstance(data, dict) or not isinstance(data.get("items", []), list):
            raise DeserializationError("Response is not a list of objects")
        try:
            result = EntityList.from_dict(data, lazy=False)
        except (TypeError, ValueError, AttributeError) as e:
            raise DeserializationError(f"Invalid list response: {e}") from e
        cont = result.metadata.continue_ if result.metadata is not None else None
        if cont:
            br.params["continue"] = cont
        items = [self.convert_to_resource(res, item) for item in result.items or []]
        return bool(cont), items

    def watch_driver(self, br: BasicRequest) -> WatchDriver:
        res = br.response_type
        return WatchDriver(lambda obj: self.convert_to_resource(res, obj))

    def new_watcher(self, send, br: BasicRequest, on_event: OnEventHandler = None,
                    on_error: OnErrorHandler = None, on_close: OnCloseHandler = None):
        return self.WatcherType(
            send, self.watch_driver(br), on_event=on_event, on_error=on_error, on_close=on_close,
            name=f"watch {resolve(br.response_type).plural}"
        )


class GenericSyncClient(GenericClient):
    def send(self, req, stream=False):
        logger.debug("%s %s", req.method, req.url)
        try:
            return self._client.send(req, stream=stream)
        except httpx.HTTPError as e:
            raise transform_exception(e) from e

    def request(self, method, res: Type[r.Resource] = None, obj=None, name=None, namespace=None,
                subresource: str = None, params: dict = None) -> Any:
        br = self.prepare_request(method, res, obj, name, namespace, subresource=subresource, params=params)
        req = self.build_adapter_request(br)
        resp = self.send(req)
        return self.handle_response(method, resp, br)

    def request_or_none(self, method, res: Type[r.Resource] = None, name=None, namespace=None) -> Optional[Any]:
        """Same as `request`, but return `None` when the object doesn't exist"""
        try:
            return self.request(method, res=res, name=name, namespace=namespace)
        except NotFoundError:
            logger.debug("%s %s/%s: not found", method, resolve(res).plural, name)
            return None

    def list(self, br: BasicRequest) -> list:
        items = []
        cont = True
        while cont:
            req = self.build_adapter_request(br)
            resp = self.send(req)
            cont, chunk = self.handle_response("list", resp, br)
            items.extend(chunk)
        return items

    def get_json(self, url: str) -> Any:
        resp = self.send(self._client.build_request("GET", url))
        self.raise_for_status(resp)
        return self.decode_json(resp)

    def watch(self, br: BasicRequest, **handlers) -> Watcher:
        def send():
            return self.send(self.build_adapter_request(br, timeout=self._watch_timeout), stream=True)
        return self.new_watcher(send, br, **handlers)

    def close(self):
        self._client.close()


class GenericAsyncClient(GenericClient):
    AdapterClient = staticmethod(client_adapter.AsyncClient)
    WatcherType = AsyncWatcher

    async def send(self, req, stream=False):
        logger.debug("%s %s", req.method, req.url)
        try:
            return await self._client.send(req, stream=stream)
        except httpx.HTTPError as e:
            raise transform_exception(e) from e

    async def request(self, method, res: Type[r.Resource] = None, obj=None, name=None, namespace=None,
                      subresource: str = None, params: dict = None) -> Any:
        br = self.prepare_request(method, res, obj, name, namespace, subresource=subresource, params=params)
        req = self.build_adapter_request(br)
        resp = await self.send(req)
        return self.handle_response(method, resp, br)

    async def request_or_none(self, method, res: Type[r.Resource] = None, name=None,
                              namespace=None) -> Optional[Any]:
        """Same as `request`, but return `None` when the object doesn't exist"""
        try:
            return await self.request(method, res=res, name=name, namespace=namespace)
        except NotFoundError:
            logger.debug("%s %s/%s: not found", method, resolve(res).plural, name)
            return None

    async def list(self, br: BasicRequest) -> list:
        items = []
        cont = True
        while cont:
            req = self.build_adapter_request(br)
            resp = await self.send(req)
            cont, chunk = self.handle_response("list", resp, br)
            items.extend(chunk)
        return items

    async def get_json(self, url: str) -> Any:
        resp = await self.send(self._client.build_request("GET", url))
        self.raise_for_status(resp)
        return self.decode_json(resp)

    def watch(self, br: BasicRequest, **handlers) -> AsyncWatcher:
        async def send():
            return await self.send(self.build_adapter_request(br, timeout=self._watch_timeout), stream=True)
        return self.new_watcher(send, br, **handlers)

    async def close(self):
        await self._client.aclose()
