from pathlib import Path

import pytest

from kubentity.config import namespace


@pytest.fixture
def ns_file(tmpdir):
    return Path(tmpdir).joinpath("namespace")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(namespace.POD_NAMESPACE_ENV, raising=False)
    monkeypatch.delenv("MY_NAMESPACE", raising=False)


def test_default(ns_file):
    assert namespace.current_namespace(namespace_file=ns_file) == "default"


def test_configured(ns_file):
    assert namespace.current_namespace("team-a", namespace_file=ns_file) == "team-a"


def test_env_overrides_configured(ns_file, monkeypatch):
    monkeypatch.setenv(namespace.POD_NAMESPACE_ENV, "from-env")
    assert namespace.current_namespace("team-a", namespace_file=ns_file) == "from-env"


def test_custom_env_var(ns_file, monkeypatch):
    monkeypatch.setenv("MY_NAMESPACE", "custom")
    monkeypatch.setenv(namespace.POD_NAMESPACE_ENV, "from-env")
    assert namespace.current_namespace(env_var="MY_NAMESPACE", namespace_file=ns_file) == "custom"


def test_file_overrides_all(ns_file, monkeypatch):
    ns_file.write_text("  from-file\n")
    monkeypatch.setenv(namespace.POD_NAMESPACE_ENV, "from-env")
    assert namespace.current_namespace("team-a", namespace_file=ns_file) == "from-file"


def test_default_file_location(ns_file, monkeypatch):
    ns_file.write_text("mounted")
    monkeypatch.setattr(namespace, "SERVICE_ACCOUNT_NAMESPACE", str(ns_file))
    assert namespace.current_namespace() == "mounted"


def test_unreadable_file(ns_file, monkeypatch):
    ns_file.write_text("x")

    def fail(self):
        raise PermissionError("denied")

    monkeypatch.setattr(Path, "read_text", fail)
    assert namespace.current_namespace("team-a", namespace_file=ns_file) == "team-a"
