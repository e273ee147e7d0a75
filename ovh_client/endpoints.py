"""
Endpoints of the OVH API and its white-label variants.
"""

from enum import Enum
from typing import Optional

from .exceptions import ConfigurationError


class Endpoint(Enum):
    """Base URLs of the available APIs."""

    OVH_EU = "https://api.ovh.com/"
    OVH_CA = "https://ca.api.ovh.com/"
    KIMSUFI_EU = "https://eu.api.kimsufi.com/"
    KIMSUFI_CA = "https://ca.api.kimsufi.com/"
    SOYOUSTART_EU = "https://eu.api.soyoustart.com/"
    SOYOUSTART_CA = "https://ca.api.soyoustart.com/"
    RUNABOVE = "https://api.runabove.com/"

    @property
    def latest_version(self) -> str:
        """Latest version string of this API."""
        return LATEST_VERSIONS[self]

    def base_url(self, version: Optional[str] = None) -> str:
        """Base URL of the given version, the latest one by default."""
        return f"{self.value}{version or self.latest_version}"

    @classmethod
    def from_name(cls, name: str) -> "Endpoint":
        """
        Look up an endpoint by its short name (e.g. "ovh-eu", "kimsufi-ca").

        Raises:
            ConfigurationError: If the name is unknown
        """
        key = name.strip().upper().replace('-', '_')
        try:
            return cls[key]
        except KeyError:
            raise ConfigurationError(f"Unknown endpoint: {name!r}") from None


LATEST_VERSIONS = {
    Endpoint.OVH_EU: "1.0",
    Endpoint.OVH_CA: "1.0",
    Endpoint.KIMSUFI_EU: "1.0",
    Endpoint.KIMSUFI_CA: "1.0",
    Endpoint.SOYOUSTART_EU: "1.0",
    Endpoint.SOYOUSTART_CA: "1.0",
    Endpoint.RUNABOVE: "1.0",
}
