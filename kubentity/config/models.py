from typing import Dict
from dataclasses import dataclass, field
import tempfile
import base64

from ..core.dataclasses_dict import DataclassDictMixIn


class FileStr(str):
    """Path of a temporary file holding base64 decoded `data`. The file lives as long as this object."""
    def __new__(cls, data):
        if data is None:
            return None

        f = tempfile.NamedTemporaryFile()
        f.write(base64.b64decode(data))
        f.flush()
        file = str.__new__(cls, f.name)
        file.handler = f
        return file

    def __del__(self):
        if getattr(self, "handler", None):
            self.handler.close()
            self.handler = None


@dataclass
class Context(DataclassDictMixIn):
    cluster: str
    user: str = None
    namespace: str = None


@dataclass
class User(DataclassDictMixIn):
    username: str = None
    password: str = None
    token: str = None
    token_file: str = field(metadata={'json': 'tokenFile'}, default=None)
    auth_provider: Dict = field(metadata={'json': 'auth-provider'}, default=None)
    client_cert: str = field(metadata={'json': 'client-certificate'}, default=None)
    client_cert_data: str = field(metadata={'json': 'client-certificate-data'}, default=None)
    client_key: str = field(metadata={'json': 'client-key'}, default=None)
    client_key_data: str = field(metadata={'json': 'client-key-data'}, default=None)


@dataclass
class Cluster(DataclassDictMixIn):
    server: str = "http://localhost:8080"
    certificate_auth: str = field(metadata={'json': 'certificate-authority'}, default=None)
    certificate_auth_data: str = field(metadata={'json': 'certificate-authority-data'}, default=None)
    insecure: bool = field(metadata={'json': 'insecure-skip-tls-verify'}, default=False)
