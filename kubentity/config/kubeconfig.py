import os
from pathlib import Path
from typing import Dict, NamedTuple, Optional

import yaml

from ..core import exceptions
from .models import Cluster, User, Context

"""
| behavior                  | kubectl                   | kubentity             |
|---------------------------|---------------------------|-----------------------|
| current-context missing   | use proxy                 | fail (conf is None)   |
| current-context wrong     | fail                      | fail                  |
| context.cluster missing   | use proxy                 | fail                  |
| context.user missing      | interactive user/password | no auth set           |
| context.user wrong        | interactive user/password | fail                  |
| context.namespace missing | use default namespace     | not configured        |
"""

DEFAULT_NAMESPACE = "default"
SERVICE_ACCOUNT = "/var/run/secrets/kubernetes.io/serviceaccount"
DEFAULT_KUBECONFIG = "~/.kube/config"


def to_mapping(obj_list, key, factory):
    return {obj['name']: factory.from_dict(obj[key], lazy=False) for obj in obj_list}


class SingleConfig(NamedTuple):
    """Cluster, user and namespace selected by one kubeconfig context. This is what a `Client` is built from."""

    #: name of the selected context
    context_name: str
    context: Context
    cluster: Cluster
    user: Optional[User] = None
    #: kubeconfig file, used to resolve relative certificate paths
    fname: Optional[Path] = None

    @property
    def namespace(self) -> Optional[str]:
        """Namespace set in the context, `None` when the context doesn't set one.

        The configured namespace never changes the endpoint of a call, it only takes part in
        `Client.current_namespace()`.
        """
        return self.context.namespace

    def abs_file(self, fname):
        """Resolve `fname` relatively to the kubeconfig file. Absolute paths are returned unchanged."""
        if Path(fname).is_absolute():
            return fname

        if self.fname is None:
            raise exceptions.ConfigurationError(f"{fname} is relative, but kubeconfig path unknown")

        return self.fname.parent.joinpath(fname)


#: configuration of `kubectl proxy` running with default settings
PROXY_CONF = SingleConfig(
    context_name="default", context=Context(cluster="default"),
    cluster=Cluster(server="http://localhost:8080")
)


class KubeConfig:
    """Clusters, users and contexts of a kubeconfig. Build it with one of the `from_*` constructors and
    pass it to `Client`, which uses its current context, or select a context explicitly with `get()`.

    Attributes:
      clusters: Dictionary of cluster name -> `Cluster` instance.
      contexts: Dictionary of context name -> `Context` instance.
      users: Dictionary of user name -> `User` instance.
      current_context: Name of the context used when none is requested.
    """
    clusters: Dict[str, Cluster]
    users: Dict[str, User]
    contexts: Dict[str, Context]

    def __init__(self, *, clusters: Dict[str, Cluster], contexts: Dict[str, Context],
                 users: Dict[str, User] = None, current_context: str = None, fname=None):
        self.current_context = current_context
        self.clusters = clusters
        self.contexts = contexts
        self.users = users or {}
        self.fname = Path(fname) if fname else None

    @classmethod
    def from_dict(cls, conf: Dict, fname=None) -> "KubeConfig":
        """Build the configuration from the parsed content of a kubeconfig file.

        **Parameters**

        * **conf**: Mapping with `clusters` and `contexts` (required), `users` and `current-context`.
        * **fname**: File the content was read from, relative certificate paths are resolved against it.

        Raises `ConfigurationError` when the structure is not a valid kubeconfig.
        """
        try:
            return cls(
                current_context=conf.get('current-context'),
                clusters=to_mapping(conf['clusters'], 'cluster', factory=Cluster),
                contexts=to_mapping(conf['contexts'], 'context', factory=Context),
                users=to_mapping(conf.get('users') or [], 'user', factory=User),
                fname=fname
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise exceptions.ConfigurationError(f"Invalid kubeconfig: {e}") from e

    def get(self, context_name: str = None, default: SingleConfig = None) -> SingleConfig:
        """Select a context and return its `SingleConfig`.

        **Parameters**

        * **context_name**: Context to select, `current-context` when not set.
        * **default**: Returned when no context is requested and `current-context` is not set.

        Raises `ConfigurationError` when no context can be selected, or when the context refers to a
        cluster or user that is not defined.
        """
        if context_name is None:
            context_name = self.current_context
        if context_name is None:
            if default is None:
                raise exceptions.ConfigurationError("No current context set and no default provided")
            return default
        try:
            ctx = self.contexts[context_name]
        except KeyError:
            raise exceptions.ConfigurationError(f"Context '{context_name}' not found")
        try:
            cluster = self.clusters[ctx.cluster]
            user = self.users[ctx.user] if ctx.user else None
        except KeyError as e:
            raise exceptions.ConfigurationError(f"Context '{context_name}' refers to unknown entry {e}")
        return SingleConfig(
            context_name=context_name, context=ctx,
            cluster=cluster, user=user, fname=self.fname
        )

    @classmethod
    def from_file(cls, fname) -> "KubeConfig":
        """Load a kubeconfig file (YAML). `~` is expanded. Raises `ConfigurationError` if the file doesn't exist."""
        filepath = Path(fname).expanduser()
        if not filepath.is_file():
            raise exceptions.ConfigurationError(f"Configuration file {fname} not found")
        with filepath.open() as f:
            return cls.from_dict(yaml.safe_load(f.read()), fname=filepath)

    @classmethod
    def from_one(cls, *, cluster: Cluster, user: User = None, context_name='default', namespace=None,
                 fname=None) -> "KubeConfig":
        """Configuration with a single context, named `context_name`, made of `cluster` and `user`"""
        context = Context(cluster=context_name, user=context_name if user else None, namespace=namespace)
        return cls(
            clusters={context_name: cluster},
            contexts={context_name: context},
            users={context_name: user} if user else None,
            current_context=context_name,
            fname=fname
        )

    @classmethod
    def from_server(cls, url, namespace=None) -> "KubeConfig":
        """Configuration for an API server reachable at `url` without authentication (e.g. `kubectl proxy`)"""
        return cls.from_one(cluster=Cluster(server=url), namespace=namespace)

    @classmethod
    def from_service_account(cls, path=SERVICE_ACCOUNT) -> "KubeConfig":
        """In-cluster configuration from the mounted service account.

        The token, namespace and CA certificate are read from `path`. The server address comes from the
        `KUBERNETES_SERVICE_HOST` and `KUBERNETES_SERVICE_PORT` environment variables.
        Raises `ConfigurationError` when any of them is missing.
        """
        account_dir = Path(path)

        try:
            token = account_dir.joinpath("token").read_text()
            namespace = account_dir.joinpath("namespace").read_text().strip()
        except FileNotFoundError as e:
            raise exceptions.ConfigurationError(str(e))

        try:
            host = os.environ["KUBERNETES_SERVICE_HOST"]
            port = os.environ["KUBERNETES_SERVICE_PORT"]
        except KeyError as e:
            raise exceptions.ConfigurationError(f"Environment variable {e} not set")
        if ":" in host:     # ipv6
            host = f"[{host}]"
        return cls.from_one(
            cluster=Cluster(
                server=f"https://{host}:{port}",
                certificate_auth=str(account_dir.joinpath("ca.crt"))
            ),
            user=User(token=token),
            namespace=namespace
        )

    @classmethod
    def from_env(cls, service_account=SERVICE_ACCOUNT, default_config=DEFAULT_KUBECONFIG) -> "KubeConfig":
        """Service account configuration when running in a pod, otherwise the file named by `KUBECONFIG`
        (`default_config` when the variable is not set).
        """
        try:
            return KubeConfig.from_service_account(path=service_account)
        except exceptions.ConfigurationError:
            return KubeConfig.from_file(os.environ.get('KUBECONFIG', default_config))
