import asyncio
import json
import unittest.mock

import pytest
import httpx
import respx

import kubentity
from kubentity.config.kubeconfig import KubeConfig
from kubentity.models.meta_v1 import ObjectMeta, Status
from kubentity.resources.core_v1 import ConfigMap, Namespace, NamespaceStatus
from kubentity.generic_resource import create_namespaced_resource
from kubentity.types import WatchEventType, WatchState

from .test_client import KUBECONFIG, WATCH_URL, json_contains, make_watch_list, make_watch_sequence


@pytest.fixture
def kubeconfig(tmpdir):
    kubeconfig = tmpdir.join("kubeconfig")
    kubeconfig.write(KUBECONFIG)
    return kubeconfig


@pytest.fixture
def kubeconfig_ns(tmpdir):
    kubeconfig = tmpdir.join("kubeconfig")
    kubeconfig.write(KUBECONFIG.replace('user: test', 'user: test, namespace: ns1'))
    return kubeconfig


@pytest.fixture
def client(kubeconfig):
    config = KubeConfig.from_file(str(kubeconfig))
    return kubentity.AsyncClient(config=config)


def test_namespace(client: kubentity.AsyncClient, kubeconfig_ns):
    assert client.namespace is None

    config = KubeConfig.from_file(str(kubeconfig_ns))
    client = kubentity.AsyncClient(config=config)
    assert client.namespace == 'ns1'


@unittest.mock.patch('httpx.AsyncClient')
@unittest.mock.patch('kubentity.config.client_adapter.user_auth')
def test_client_httpx_attributes(user_auth, httpx_async_client, kubeconfig):
    config = KubeConfig.from_file(kubeconfig)
    single_conf = config.get()
    kubentity.AsyncClient(config=single_conf, trust_env=False)
    httpx_async_client.assert_called_once_with(
        timeout=httpx.Timeout(10),
        base_url=single_conf.cluster.server,
        verify=unittest.mock.ANY,
        auth=user_auth.return_value,
        trust_env=False
    )


@respx.mock
@pytest.mark.asyncio
async def test_get(client: kubentity.AsyncClient):
    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps/xx").respond(
        json={'metadata': {'name': 'xx'}})
    cm = await client.get(ConfigMap, name="xx", namespace="default")
    assert cm.metadata.name == 'xx'

    respx.get("https://localhost:9443/api/v1/namespaces/n1").respond(json={'metadata': {'name': 'n1'}})
    ns = await client.get(Namespace, name="n1")
    assert ns.metadata.name == 'n1'

    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps/missing").respond(status_code=404)
    assert await client.get(ConfigMap, name="missing", namespace="default") is None
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_get_group_resource(client: kubentity.AsyncClient):
    CronTab = create_namespaced_resource('stable.example.com', 'v1', 'CronTab', 'crontabs')
    respx.get("https://localhost:9443/apis/stable.example.com/v1/crontabs/ct").respond(
        json={'metadata': {'name': 'ct'}})
    ct = await client.get(CronTab, name="ct")
    assert ct.metadata.name == 'ct'
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_list_chunk_size(client: kubentity.AsyncClient):
    resp = {'items': [{'metadata': {'name': 'xx'}}, {'metadata': {'name': 'yy'}}], 'metadata': {'continue': 'yes'}}
    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps?limit=3").respond(json=resp)
    resp = {'items': [{'metadata': {'name': 'zz'}}]}
    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps?limit=3&continue=yes").respond(json=resp)
    cms = await client.list(ConfigMap, namespace="default", chunk_size=3)
    assert [cm.metadata.name for cm in cms] == ['xx', 'yy', 'zz']

    respx.get("https://localhost:9443/api/v1/configmaps?labelSelector=app").respond(json=resp)
    cms = await client.list(ConfigMap, labels={'app': None})
    assert [cm.metadata.name for cm in cms] == ['zz']
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_list_invalid_response(client: kubentity.AsyncClient):
    respx.get("https://localhost:9443/api/v1/configmaps").respond(json=['not', 'a', 'list'])
    with pytest.raises(kubentity.DeserializationError):
        await client.list(ConfigMap)
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_create_update(client: kubentity.AsyncClient):
    req = respx.post("https://localhost:9443/api/v1/namespaces/default/configmaps").respond(
        json={'metadata': {'name': 'xx', 'resourceVersion': '1'}})
    cm = await client.create(ConfigMap(metadata=ObjectMeta(name="xx", namespace="default"), data={'a': 'b'}))
    json_contains(req.calls[0][0].read(), {"data": {"a": "b"}, "kind": "ConfigMap"})
    assert cm.metadata.resourceVersion == '1'

    respx.put("https://localhost:9443/api/v1/namespaces/default/configmaps/xx").respond(
        json={'message': 'conflict'}, status_code=409)
    with pytest.raises(kubentity.ConflictError):
        await client.update(ConfigMap(metadata=ObjectMeta(name="xx", namespace="default", resourceVersion='0')))
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_save(client: kubentity.AsyncClient):
    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps/xx").respond(
        json={'metadata': {'name': 'xx', 'uid': 'server-uid', 'resourceVersion': '7'}})
    put = respx.put("https://localhost:9443/api/v1/namespaces/default/configmaps/xx").respond(
        json={'metadata': {'name': 'xx', 'uid': 'server-uid', 'resourceVersion': '8'}})
    cm = ConfigMap(metadata=ObjectMeta(name="xx", namespace="default"))
    result = await client.save(cm)
    json_contains(put.calls[0][0].read(), {
        "metadata": {"name": "xx", "namespace": "default", "uid": "server-uid", "resourceVersion": "7"}
    })
    assert result.metadata.resourceVersion == '8'

    respx.get("https://localhost:9443/api/v1/namespaces/default/configmaps/yy").respond(status_code=404)
    post = respx.post("https://localhost:9443/api/v1/namespaces/default/configmaps").respond(
        json={'metadata': {'name': 'yy'}})
    await client.save(ConfigMap(metadata=ObjectMeta(name="yy", namespace="default")))
    assert post.called
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_update_status(client: kubentity.AsyncClient):
    respx.put("https://localhost:9443/api/v1/namespaces/n1/status").respond(
        json={'metadata': {'name': 'n1', 'resourceVersion': '3'}})
    ns = Namespace(metadata=ObjectMeta(name='n1', resourceVersion='2'), status=NamespaceStatus(phase='Active'))
    await client.update_status(ns)
    assert ns.metadata.resourceVersion == '3'
    await client.close()



@respx.mock
@pytest.mark.asyncio
async def test_update_status_without_metadata(client: kubentity.AsyncClient):
    respx.put("https://localhost:9443/api/v1/namespaces/n1/status").respond(json={'status': {'phase': 'Active'}})
    ns = Namespace(metadata=ObjectMeta(name='n1', resourceVersion='2'))
    with pytest.raises(kubentity.DeserializationError):
        await client.update_status(ns)
    assert ns.metadata.resourceVersion == '2'
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_delete(client: kubentity.AsyncClient):
    route = respx.delete("https://localhost:9443/api/v1/namespaces/default/configmaps/xx").respond(status_code=404)
    await client.delete(ConfigMap, name="xx", namespace="default")
    await client.delete(ConfigMap(metadata=ObjectMeta(name="xx", namespace="default")))
    assert route.call_count == 2
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_delete_many_failure(client: kubentity.AsyncClient):
    r1 = respx.delete("https://localhost:9443/api/v1/namespaces/default/configmaps/a")
    r2 = respx.delete("https://localhost:9443/api/v1/namespaces/default/configmaps/b").respond(
        json={'message': 'second'}, status_code=500)
    r3 = respx.delete("https://localhost:9443/api/v1/namespaces/default/configmaps/c").respond(
        json={'message': 'third'}, status_code=500)
    objs = [ConfigMap(metadata=ObjectMeta(name=name, namespace="default")) for name in "abc"]
    with pytest.raises(kubentity.ApiError, match='second'):
        await client.delete(objs)
    assert r1.called and r2.called and r3.called
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_server_version(client: kubentity.AsyncClient):
    respx.get("https://localhost:9443/version").respond(json={"major": "1", "minor": "29"})
    version = await client.server_version()
    assert (version.major, version.minor) == ('1', '29')
    await client.close()


@pytest.mark.asyncio
async def test_context_manager(kubeconfig):
    async with kubentity.AsyncClient(config=KubeConfig.from_file(str(kubeconfig))) as client:
        httpx_client = client._client._client
        assert not httpx_client.is_closed
    assert httpx_client.is_closed


@respx.mock
@pytest.mark.asyncio
async def test_watch_iter(client: kubentity.AsyncClient):
    respx.get(WATCH_URL).respond(content=make_watch_list())
    watcher = client.watch(ConfigMap, 30, namespace="default")
    i = -1
    async for op, cm in watcher:
        i += 1
        assert cm.metadata.name == f'p{i}'
        assert op is WatchEventType.ADDED
    assert i == 9
    assert watcher.state is WatchState.CLOSED
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_watch_callbacks(client: kubentity.AsyncClient):
    respx.get(WATCH_URL).respond(content=make_watch_sequence())
    events = []
    closed = []
    errors = []
    watcher = client.watch(ConfigMap, 30, events.append, errors.append, lambda: closed.append(True),
                           namespace="default")
    await watcher.wait()
    assert [ev.type for ev in events] == [WatchEventType.ADDED, WatchEventType.MODIFIED, WatchEventType.DELETED]
    assert closed == [True]
    assert errors == []
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_watch_error_event_and_decode_error(client: kubentity.AsyncClient):
    content = "\n".join([
        "{broken",
        json.dumps({'type': 'ERROR', 'object': {'kind': 'Status', 'code': 410}}),
    ])
    respx.get(WATCH_URL).respond(content=content)
    errors = []
    events = [ev async for ev in client.watch(ConfigMap, 30, on_error=errors.append, namespace="default")]
    assert len(errors) == 1
    assert isinstance(errors[0], kubentity.DeserializationError)
    assert isinstance(events[0].object, Status)
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_watch_stream_error(client: kubentity.AsyncClient):
    respx.get(WATCH_URL).respond(status_code=500, content="broken")
    errors = []
    closed = []
    watcher = client.watch(ConfigMap, 30, lambda ev: None, errors.append, lambda: closed.append(True),
                           namespace="default")
    await watcher.wait()
    assert len(errors) == 1
    assert isinstance(errors[0], kubentity.StreamError)
    assert closed == []
    assert watcher.state is WatchState.ERRORED

    with pytest.raises(kubentity.StreamError):
        async for _ in client.watch(ConfigMap, 30, namespace="default"):
            pass
    await client.close()


@respx.mock
@pytest.mark.asyncio
async def test_watch_cancel(client: kubentity.AsyncClient):
    respx.get(WATCH_URL).respond(content=make_watch_list())
    closed = []
    errors = []
    watcher = client.watch(ConfigMap, 30, on_error=errors.append, on_close=lambda: closed.append(True),
                           namespace="default")
    received = []
    async for ev in watcher:
        received.append(ev)
        watcher.cancel()
    assert len(received) == 1
    assert watcher.state is WatchState.CANCELLED
    assert closed == [True]
    assert errors == []
    await client.close()


class SlowStream(httpx.AsyncByteStream):
    """First event immediately, then nothing for a long time"""
    async def __aiter__(self):
        yield (json.dumps({'type': 'ADDED', 'object': {'metadata': {'name': 'a'}}}) + "\n").encode()
        await asyncio.sleep(60)

    async def aclose(self):
        pass


@pytest.mark.asyncio
async def test_watch_cancel_task(client: kubentity.AsyncClient):
    started = asyncio.Event()

    with respx.mock:
        respx.get(WATCH_URL).respond(stream=SlowStream())
        closed = []
        errors = []

        def on_event(ev):
            started.set()

        watcher = client.watch(ConfigMap, 30, on_event, errors.append, lambda: closed.append(True),
                               namespace="default")
        await asyncio.wait_for(started.wait(), 5)
        watcher.cancel()
        await watcher.wait()
    assert watcher.state is WatchState.CANCELLED
    assert closed == [True]
    assert errors == []
    await client.close()
