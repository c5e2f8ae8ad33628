import ssl
from pathlib import Path
from typing import Optional

import httpx

from .kubeconfig import SingleConfig
from .models import Cluster, User, FileStr
from ..core.exceptions import ConfigurationError


def Client(config: SingleConfig, timeout: httpx.Timeout, trust_env: bool = True,
           transport: httpx.BaseTransport = None, proxy: str = None) -> httpx.Client:
    return httpx.Client(**httpx_parameters(config, timeout, trust_env, transport, proxy))


def AsyncClient(config: SingleConfig, timeout: httpx.Timeout, trust_env: bool = True,
                transport: httpx.AsyncBaseTransport = None, proxy: str = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(**httpx_parameters(config, timeout, trust_env, transport, proxy))


def httpx_parameters(config: SingleConfig, timeout: httpx.Timeout, trust_env: bool,
                     transport=None, proxy: str = None):
    params = dict(
        timeout=timeout,
        base_url=config.cluster.server,
        verify=verify_cluster(config.cluster, config.user, config.abs_file),
        auth=user_auth(config.user),
        trust_env=trust_env,
    )
    if transport is not None:
        params["transport"] = transport
    if proxy is not None:
        params["proxy"] = proxy
    return params


class BearerAuth(httpx.Auth):
    def __init__(self, token):
        self._bearer = f"Bearer {token}"

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = self._bearer
        yield request


class BearerFileAuth(httpx.Auth):
    """Bearer token read from a file on every request, as projected service account tokens get rotated"""
    def __init__(self, token_file):
        self._token_file = Path(token_file)

    def auth_flow(self, request: httpx.Request):
        token = self._token_file.read_text().strip()
        request.headers["Authorization"] = f"Bearer {token}"
        yield request


def user_auth(user: Optional[User]):
    if user is None:
        return None

    if user.token is not None:
        return BearerAuth(user.token.strip())

    if user.token_file is not None:
        return BearerFileAuth(user.token_file)

    if user.username and user.password:
        return httpx.BasicAuth(user.username, user.password)

    if user.auth_provider:
        raise ConfigurationError("auth-provider not supported")


def user_cert(user: Optional[User], abs_file):
    """Extract user certificates"""
    if user is not None and (user.client_cert or user.client_cert_data):
        return (
            FileStr(user.client_cert_data) or abs_file(user.client_cert),
            FileStr(user.client_key_data) or abs_file(user.client_key)
        )
    return None


def verify_cluster(cluster: Cluster, user: Optional[User], abs_file):
    """setup certificate verification"""
    if cluster.certificate_auth:
        ctx = ssl.create_default_context(cafile=str(abs_file(cluster.certificate_auth)))
    elif cluster.certificate_auth_data:
        ctx = ssl.create_default_context(cafile=FileStr(cluster.certificate_auth_data))
    else:
        ctx = ssl.create_default_context()

    if cluster.insecure:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE

    certs = user_cert(user, abs_file)
    if certs:
        ctx.load_cert_chain(str(certs[0]), str(certs[1]))
    return ctx
