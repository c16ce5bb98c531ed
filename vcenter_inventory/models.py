from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

Numeric = Union[float, str]  # float, or the "N/A" sentinel


class PowerState(Enum):
    POWERED_ON = "PoweredOn"
    POWERED_OFF = "PoweredOff"
    SUSPENDED = "Suspended"
    UNKNOWN = "Unknown"

    @classmethod
    def from_vim(cls, value):
        return {
            "poweredOn": cls.POWERED_ON,
            "poweredOff": cls.POWERED_OFF,
            "suspended": cls.SUSPENDED,
        }.get(str(value), cls.UNKNOWN)


@dataclass(frozen=True)
class Connection:
    endpoint: str
    server_version: str
    server_build: str
    user: str


@dataclass(frozen=True)
class VMRecord:
    name: str
    power_state: Union[PowerState, str]
    num_cpu: Union[int, str]
    memory_gb: Numeric
    provisioned_gb: Numeric
    used_gb: Numeric
    guest_os: str
    host: str
    cluster: str
    datastores: Union[Tuple[str, ...], str]
    tools_status: str
    ip_addresses: Union[Tuple[str, ...], str]
    created: str
    hardware_version: str
    folder: str
    notes: str


@dataclass(frozen=True)
class HostRecord:
    name: str
    connection_state: str
    version: str
    build: str
    cpu_model: str
    cpu_cores: Union[int, str]
    memory_gb: Numeric
    nic_count: Union[int, str]
    vswitch_count: Union[int, str]
    vmotion_enabled: Union[bool, str]
    management_ip: str
    manufacturer: str
    model: str
    license_key: str


@dataclass(frozen=True)
class DatastoreRecord:
    name: str
    type: str
    capacity_gb: Numeric
    free_gb: Numeric
    used_gb: Numeric
    percent_free: Numeric
    accessible: Union[bool, str]
    host_count: Union[int, str]
