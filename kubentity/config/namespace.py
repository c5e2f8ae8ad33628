import logging
import os
from pathlib import Path

from .kubeconfig import DEFAULT_NAMESPACE, SERVICE_ACCOUNT

logger = logging.getLogger(__name__)

POD_NAMESPACE_ENV = "POD_NAMESPACE"
SERVICE_ACCOUNT_NAMESPACE = f"{SERVICE_ACCOUNT}/namespace"


def current_namespace(configured: str = None, env_var: str = POD_NAMESPACE_ENV,
                      namespace_file=None) -> str:
    """Return the namespace the current process should operate in.

    Sources are checked in this order, later ones override earlier ones:

    1. the literal `"default"`;
    2. `configured`, the namespace set on the client configuration;
    3. the environment variable `env_var` (downward API);
    4. the content of the mounted service account file `namespace_file`
       (by default `SERVICE_ACCOUNT_NAMESPACE`).

    This function never fails.
    """
    result = DEFAULT_NAMESPACE

    if configured is not None:
        result = configured

    value = os.environ.get(env_var)
    if value is not None:
        result = value

    path = Path(namespace_file if namespace_file is not None else SERVICE_ACCOUNT_NAMESPACE)
    if path.is_file():
        try:
            result = path.read_text().strip()
        except OSError as e:
            logger.warning("Unable to read namespace from %s: %s", path, e)

    return result
