from datetime import datetime
from types import SimpleNamespace

import pytest

from vcenter_inventory.config import RunConfig, RunContext
from vcenter_inventory.errors import EnumerationFault
from vcenter_inventory.extract import Field, Schema
from vcenter_inventory.models import Connection, DatastoreRecord, HostRecord, PowerState, VMRecord
from vcenter_inventory.schemas import GB, datastore_schema, host_schema, vm_schema


def make_vm(name, power="poweredOn", memory_mb=4096, host=None):
    host = host or SimpleNamespace(name="esx01", parent=SimpleNamespace(name="standalone"))
    return SimpleNamespace(
        name=name,
        runtime=SimpleNamespace(powerState=power, host=host),
        config=SimpleNamespace(
            hardware=SimpleNamespace(numCPU=2, memoryMB=memory_mb),
            createDate=datetime(2024, 1, 2, 3, 4, 5),
            version="vmx-19",
            annotation="",
        ),
        summary=SimpleNamespace(
            storage=SimpleNamespace(committed=10 * GB, uncommitted=5 * GB),
            config=SimpleNamespace(guestFullName="Ubuntu Linux (64-bit)"),
        ),
        datastore=[SimpleNamespace(name="ds1")],
        guest=SimpleNamespace(toolsStatus="toolsOk", ipAddress="10.0.0.5",
                              net=[SimpleNamespace(ipAddress=["10.0.0.5", "fe80::1"])]),
        parent=None,
    )


def make_host(name, state="connected", memory=64 * GB):
    return SimpleNamespace(
        name=name,
        runtime=SimpleNamespace(connectionState=state),
        config=SimpleNamespace(
            product=SimpleNamespace(version="8.0.2", build="22380479"),
            network=SimpleNamespace(
                pnic=[object(), object()],
                vswitch=[object()],
                vnic=[SimpleNamespace(key="key-vim.host.VirtualNic-vmk0",
                                      spec=SimpleNamespace(ip=SimpleNamespace(ipAddress="192.168.1.10")))],
            ),
            virtualNicManagerInfo=SimpleNamespace(netConfig=[]),
        ),
        summary=SimpleNamespace(
            hardware=SimpleNamespace(cpuModel="Intel Xeon", numCpuCores=32, memorySize=memory),
            config=SimpleNamespace(vmotionEnabled=True),
        ),
        hardware=SimpleNamespace(systemInfo=SimpleNamespace(vendor="Dell Inc.", model="PowerEdge R750")),
    )


def make_datastore(name, capacity=1000 * GB, free=250 * GB, accessible=True):
    return SimpleNamespace(
        name=name,
        summary=SimpleNamespace(type="VMFS", capacity=capacity, freeSpace=free, accessible=accessible),
        host=[object(), object(), object()],
    )


class FakeSource:
    """In-memory stand-in for VSphereSource."""

    def __init__(self, vms=(), hosts=(), datastores=(), connect_failures=0,
                 fail_listing=None, fail_disconnect=False):
        self.entities = {"vm": list(vms), "host": list(hosts), "datastore": list(datastores)}
        self.connect_failures = connect_failures
        self.fail_listing = fail_listing
        self.fail_disconnect = fail_disconnect
        self.connect_calls = 0
        self.disconnect_calls = 0

    def connect(self):
        self.connect_calls += 1
        if self.connect_calls <= self.connect_failures:
            raise ConnectionRefusedError("connection refused")
        return object()

    def describe(self):
        return Connection(endpoint="vc.example.com", server_version="8.0.2",
                          server_build="22617221", user="VSPHERE.LOCAL\\audit")

    def list_entities(self, kind):
        if kind == self.fail_listing:
            raise EnumerationFault(kind, "session expired")
        return self.entities[kind]

    def schema(self, kind):
        if kind == "vm":
            return vm_schema()
        if kind == "host":
            return host_schema(lambda host: "AAAAA-BBBBB-CCCCC-DDDDD-EEEEE")
        return datastore_schema()

    def disconnect(self):
        self.disconnect_calls += 1
        if self.fail_disconnect:
            raise RuntimeError("session already closed")


@pytest.fixture
def credential_file(tmp_path):
    path = tmp_path / "vcenter.env"
    path.write_text("VCENTER_USER=audit@vsphere.local\nVCENTER_PASSWORD=secret\n")
    return path


@pytest.fixture
def run_config(tmp_path, credential_file):
    return RunConfig(
        endpoint="vc.example.com",
        output_dir=tmp_path / "out",
        credential_path=credential_file,
        retry_delay=0,
    )


@pytest.fixture
def run_context(tmp_path):
    return RunContext.create(tmp_path / "out", "vc.example.com", now=datetime(2025, 3, 4, 5, 6, 7))


# Simple schema over plain dicts for collector tests
class Row(SimpleNamespace):
    pass


def row_schema(extra_accessor=None):
    fields = [
        Field("name", "Name", lambda e: e["name"]),
        Field("size", "Size", lambda e: e["size"], numeric=True),
    ]
    if extra_accessor is not None:
        fields.append(Field("extra", "Extra", extra_accessor))
    return Schema("Row", Row, tuple(fields))


def sample_records():
    vms = [
        VMRecord("web01", PowerState.POWERED_ON, 2, 4.0, 15.0, 10.0, "Ubuntu", "esx01", "prod",
                 ("ds1",), "toolsOk", ("10.0.0.5",), "2024-01-02T03:04:05", "vmx-19", "Prod/Web", ""),
        VMRecord("db01", PowerState.POWERED_OFF, 4, 16.5, 100.0, 80.0, "RHEL", "esx02", "prod",
                 ("ds1", "ds2"), "toolsNotRunning", (), "N/A", "vmx-19", "/", "primary db"),
    ]
    hosts = [
        HostRecord("esx01", "connected", "8.0.2", "22380479", "Intel Xeon", 32, 512.0, 4, 2, True,
                   "192.168.1.10", "Dell Inc.", "PowerEdge R750", "N/A"),
        HostRecord("esx02", "disconnected", "8.0.2", "22380479", "Intel Xeon", 32, "N/A", 4, 2, True,
                   "192.168.1.11", "Dell Inc.", "PowerEdge R750", "N/A"),
    ]
    datastores = [
        DatastoreRecord("ds1", "VMFS", 1000.0, 250.0, 750.0, 25.0, True, 2),
        DatastoreRecord("ds2", "NFS", 500.0, 250.0, 250.0, 50.0, False, 1),
    ]
    return vms, hosts, datastores
