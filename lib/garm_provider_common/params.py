"""Wire models exchanged between GARM and external providers.

Field names follow the JSON the controller produces and expects, so every
model dumps by alias. Models accept either the alias or the attribute name
on input, which keeps provider code and tests readable.
"""

from __future__ import annotations

import base64
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)


class OSType(str, Enum):
    """Operating system family of an instance."""

    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


class OSArch(str, Enum):
    """CPU architecture of an instance."""

    I386 = "i386"
    AMD64 = "amd64"
    ARM = "arm"
    ARM64 = "arm64"


class InstanceStatus(str, Enum):
    """Lifecycle status reported by a provider for an instance."""

    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"
    PENDING_DELETE = "pending_delete"
    PENDING_FORCE_DELETE = "pending_force_delete"
    DELETING = "deleting"
    DELETED = "deleted"
    PENDING_CREATE = "pending_create"
    CREATING = "creating"
    UNKNOWN = "unknown"


class AddressType(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


def _decode_base64(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value)
    return value


# Byte blobs travel as standard (not URL-safe) base64 strings
Base64Blob = Annotated[
    bytes,
    BeforeValidator(_decode_base64),
    PlainSerializer(lambda v: base64.b64encode(v).decode("ascii"), when_used="json"),
]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        """Serialize using the controller's field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class Address(_WireModel):
    address: str = Field(default="", description="IP address or hostname")
    type: AddressType = Field(default=AddressType.PRIVATE, description="Address scope")


class RunnerApplicationDownload(_WireModel):
    """A runner tools archive the instance should fetch at boot."""

    os: str | None = None
    architecture: str | None = None
    download_url: str | None = None
    filename: str | None = None
    sha256_checksum: str | None = None
    temp_download_token: str | None = None


class UserDataOptions(_WireModel):
    disable_updates_on_boot: bool = False
    extra_packages: list[str] = Field(default_factory=list)
    enable_boot_debug: bool = False


class BootstrapInstance(_WireModel):
    """Everything a provider needs to create a runner instance.

    Sent by the controller on standard input for the create command.
    """

    name: str = Field(default="", description="Instance name chosen by the controller")
    tools: list[RunnerApplicationDownload] = Field(default_factory=list)
    repo_url: str = ""
    callback_url: str = Field(default="", alias="callback-url")
    metadata_url: str = Field(default="", alias="metadata-url")
    instance_token: str = Field(default="", alias="instance-token")
    ssh_keys: list[str] = Field(default_factory=list, alias="ssh-keys")
    extra_specs: Any = Field(
        default=None, description="Opaque pool-level provider-specific JSON"
    )
    github_runner_group: str = Field(default="", alias="github-runner-group")
    ca_cert_bundle: Base64Blob | None = Field(default=None, alias="ca-cert-bundle")
    os_arch: OSArch | None = Field(default=None, alias="arch")
    os_type: OSType | None = None
    flavor: str = ""
    image: str = ""
    labels: list[str] = Field(default_factory=list)
    pool_id: str = ""
    user_data_options: UserDataOptions = Field(default_factory=UserDataOptions)
    jit_config_enabled: bool = False

    @field_validator("os_arch", "os_type", mode="before")
    @classmethod
    def _empty_enum_is_unset(cls, value: Any) -> Any:
        return None if value == "" else value


class ProviderInstance(_WireModel):
    """Instance details returned by a provider to the controller."""

    provider_id: str = Field(default="", description="Backend-specific instance ID")
    name: str = ""
    os_type: OSType | None = None
    os_name: str = ""
    os_version: str = ""
    os_arch: OSArch | None = None
    addresses: list[Address] = Field(default_factory=list)
    status: InstanceStatus | None = None
    provider_fault: Base64Blob | None = None

    @field_validator("os_arch", "os_type", "status", mode="before")
    @classmethod
    def _empty_enum_is_unset(cls, value: Any) -> Any:
        return None if value == "" else value
