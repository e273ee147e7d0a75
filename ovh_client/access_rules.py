"""
Access rules requested by an application during the credential handshake.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Union


class Method(Enum):
    """HTTP methods an access rule can grant."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class AccessRule:
    """
    A permission on the API: an HTTP method applied to a path pattern
    (e.g. GET on "/vps/*").
    """

    method: Union[Method, str]
    path: str

    def __post_init__(self):
        if isinstance(self.method, str):
            object.__setattr__(self, 'method', Method(self.method.upper()))

    def to_dict(self) -> Dict[str, str]:
        """Wire representation of the rule."""
        return {"method": self.method.value, "path": self.path}


def all_rights(path: str = "/*") -> List[AccessRule]:
    """Read and write rights on the given path, on the whole API by default."""
    return [AccessRule(method, path) for method in (Method.GET, Method.POST, Method.PUT, Method.DELETE)]


def read_only_rights(path: str = "/*") -> List[AccessRule]:
    """Read-only rights on the given path, on the whole API by default."""
    return [AccessRule(Method.GET, path)]
