import asyncio
import threading
from datetime import datetime

import pytest

from kubentity import Client, AsyncClient, ConflictError, KubeConfig, WatchEventType, EqualsSelector
from kubentity.codecs import load_all_yaml
from kubentity.models.meta_v1 import ObjectMeta
from kubentity.resources.core_v1 import ConfigMap, Namespace

uid_count = 0


@pytest.fixture
def obj_name():
    global uid_count
    uid_count += 1
    return f'test-{datetime.utcnow().strftime("%Y%m%d%H%M%S")}-{uid_count}'


@pytest.fixture
def client():
    with Client(KubeConfig.from_env()) as client:
        yield client


def names(obj_list):
    return [obj.metadata.name for obj in obj_list]


def test_server_version(client):
    version = client.server_version()
    assert version.major
    assert version.gitVersion.startswith("v")


def test_global_methods(client):
    nss = client.list(Namespace)
    assert 'default' in names(nss)
    assert client.get(Namespace, 'kube-system').metadata.name == 'kube-system'


def test_namespaced_methods(client, obj_name):
    ns = client.current_namespace()
    config = ConfigMap(
        metadata=ObjectMeta(name=obj_name, namespace=ns, labels={'app-name': obj_name}),
        data={'key1': 'value1'}
    )

    created = client.create(config)
    try:
        assert created.metadata.uid
        assert created.data == {'key1': 'value1'}

        fetched = client.get(ConfigMap, obj_name, namespace=ns)
        assert fetched.metadata.resourceVersion == created.metadata.resourceVersion
        assert obj_name in names(client.list(ConfigMap, namespace=ns, labels={'app-name': obj_name}))

        fetched.data['key2'] = 'value2'
        updated = client.update(fetched)
        assert updated.data == {'key1': 'value1', 'key2': 'value2'}

        # the old version is rejected
        with pytest.raises(ConflictError):
            client.update(created)

        created.data = {'key3': 'value3'}
        saved = client.save(created)
        assert saved.metadata.uid == updated.metadata.uid
        assert saved.data == {'key3': 'value3'}
    finally:
        client.delete(ConfigMap, obj_name, namespace=ns)

    assert client.get(ConfigMap, obj_name, namespace=ns) is None
    client.delete(ConfigMap, obj_name, namespace=ns)


def test_save_missing(client, obj_name):
    ns = client.current_namespace()
    saved = client.save(ConfigMap(metadata=ObjectMeta(name=obj_name, namespace=ns), data={'a': 'b'}))
    try:
        assert saved.metadata.uid
    finally:
        client.delete(saved)


def test_delete_many(client, obj_name):
    ns = client.current_namespace()
    objs = load_all_yaml("\n---\n".join(
        f"apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: {obj_name}-{i}\n  namespace: {ns}\n"
        for i in range(3)
    ))
    for obj in objs:
        client.create(obj)
    client.delete(objs)
    for obj in objs:
        assert client.get(ConfigMap, obj.metadata.name, namespace=ns) is None


def test_watch(client, obj_name):
    ns = client.current_namespace()
    received = []
    closed = threading.Event()

    def on_event(ev):
        received.append(ev.type)
        if ev.type is WatchEventType.DELETED:
            watcher.cancel()

    watcher = client.watch(ConfigMap, 30, on_event, on_close=closed.set, namespace=ns,
                           labels=[EqualsSelector('app-name', obj_name)])
    client.create(ConfigMap(metadata=ObjectMeta(name=obj_name, namespace=ns, labels={'app-name': obj_name})))
    client.delete(ConfigMap, obj_name, namespace=ns)
    assert closed.wait(30)
    assert received == [WatchEventType.ADDED, WatchEventType.DELETED]


@pytest.mark.asyncio
async def test_async_client(obj_name):
    async with AsyncClient(KubeConfig.from_env()) as client:
        ns = client.current_namespace()
        objs = [
            ConfigMap(metadata=ObjectMeta(name=f'{obj_name}-{i}', namespace=ns), data={'i': str(i)})
            for i in range(3)
        ]
        created = await asyncio.gather(*(client.create(obj) for obj in objs))
        assert [c.data['i'] for c in created] == ['0', '1', '2']
        await client.delete_many(objs)
        assert await client.get(ConfigMap, f'{obj_name}-0', namespace=ns) is None
