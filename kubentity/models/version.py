from datetime import datetime

from ..core.schema import dataclass, DictMixin


@dataclass
class VersionInfo(DictMixin):
    """Version of the API server, as returned by `GET /version`"""
    major: str = None
    minor: str = None
    gitVersion: str = None
    gitCommit: str = None
    gitTreeState: str = None
    buildDate: datetime = None
    goVersion: str = None
    compiler: str = None
    platform: str = None
