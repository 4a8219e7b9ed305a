"""
Canonical error record and its context blocks.

``ErrorRecord`` is the single structured shape every reported failure is
normalized into. Records and blocks are frozen pydantic models: decorators
derive new records with ``model_copy(update=...)`` instead of mutating.

The wire form is flat: block fields are lifted to the top level and empty
optional values are omitted.
"""

import json
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from errlog.types import ProxyType
from errlog.utils.json_serializers import json_serializer


class _WireBlock(BaseModel):
    """Context block flattened into the top level of the wire form."""

    # Blocks whose empty fields are still sent (the host system block)
    keep_empty: ClassVar[bool] = False

    model_config = {"frozen": True, "populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True)
        if self.keep_empty:
            return data
        return {key: value for key, value in data.items() if value not in ("", None)}


class SystemInfo(_WireBlock):
    """
    Host operating system, captured once per collector.

    Attributes:
        os_type: Operating system family ("linux", "darwin", "windows")
        os_version: Human readable OS version
        os_arch: CPU architecture ("amd64", "arm64", ...)
    """

    keep_empty: ClassVar[bool] = True

    os_type: str = Field(default="", alias="osType")
    os_version: str = Field(default="", alias="osVersion")
    os_arch: str = Field(default="", alias="osArch")


class ProxyingInfo(_WireBlock):
    """
    How the failed request was proxied.

    Attributes:
        proxy_type: Proxy channel type
        local_addr: Local address of the connection
        proxy_addr: Address of the proxy
        proxy_dc: Data center of the proxy
        origin_site: Site the request was for
        scheme: URL scheme of the request
    """

    proxy_type: ProxyType | None = Field(default=None, alias="proxyType")
    local_addr: str = Field(default="", alias="localAddr")
    proxy_addr: str = Field(default="", alias="proxyAddr")
    proxy_dc: str = Field(default="", alias="proxyDataCenter")
    origin_site: str = Field(default="", alias="originSite")
    scheme: str = Field(default="", alias="scheme")


class UserLocale(_WireBlock):
    time_zone: str = Field(default="", alias="timeZone")
    language: str = Field(default="", alias="language")
    country: str = Field(default="", alias="country")


class UserAgentInfo(_WireBlock):
    user_agent: str = Field(default="", alias="userAgent")


class ErrorRecord(BaseModel):
    """
    A normalized, reportable error.

    Attributes:
        origin: Subsystem that reported the error (wire ``package``)
        kind: Canonical error kind, e.g. "net.DNSError" (wire ``type``)
        desc: Human readable description
        op: Failing operation, "" when unspecified (wire ``operation``)
        extra: Shape-specific details
        system: Host system block, shared by every record of a collector
        proxy: Proxying context, if attached
        locale: User locale, if attached
        user_agent: User agent, if attached

    Example:
        >>> record = ErrorRecord(origin="proxy", kind="io.EOF", desc="EOF",
        ...                      system=SystemInfo(os_type="linux"))
        >>> record.to_dict()["type"]
        'io.EOF'
    """

    origin: str = Field(..., alias="package", min_length=1)
    kind: str = Field(..., alias="type", min_length=1)
    desc: str = Field(..., min_length=1)
    op: str = Field(default="", alias="operation")
    extra: dict[str, str] = Field(default_factory=dict)
    system: SystemInfo = Field(default_factory=SystemInfo)
    proxy: ProxyingInfo | None = None
    locale: UserLocale | None = None
    user_agent: UserAgentInfo | None = None

    model_config = {"frozen": True, "populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        """Flat wire form of the record."""
        data: dict[str, Any] = {
            "package": self.origin,
            "type": self.kind,
            "desc": self.desc,
        }
        if self.op:
            data["operation"] = self.op
        if self.extra:
            data["extra"] = dict(self.extra)

        data.update(self.system.to_dict())
        for block in (self.proxy, self.locale, self.user_agent):
            if block is not None:
                data.update(block.to_dict())
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=json_serializer)


__all__ = [
    "SystemInfo",
    "ProxyingInfo",
    "UserLocale",
    "UserAgentInfo",
    "ErrorRecord",
]
