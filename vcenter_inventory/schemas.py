"""Field schemas for the three collected entity kinds.

Each accessor reads one property path off a pyVmomi managed object. Property
reads on managed objects are remote calls, so anything here may raise; the
extractor turns those failures into the sentinel for that cell only.
"""
from pyVmomi import vim

from vcenter_inventory.extract import Field, Schema
from vcenter_inventory.models import DatastoreRecord, HostRecord, PowerState, VMRecord

GB = 1024 ** 3


def _is_cluster(obj):
    return isinstance(obj, vim.ClusterComputeResource)


def _is_datacenter(obj):
    return isinstance(obj, vim.Datacenter)


def _unique(values):
    return tuple(dict.fromkeys(v for v in values if v))


# --- VM accessors ---
def vm_cluster(vm):
    parent = vm.runtime.host.parent
    if not _is_cluster(parent):
        return None  # standalone host
    return parent.name


def vm_datastores(vm):
    return _unique(ds.name for ds in vm.datastore)


def vm_ip_addresses(vm):
    addresses = []
    for nic in vm.guest.net or []:
        addresses.extend(nic.ipAddress or [])
    if vm.guest.ipAddress:
        addresses.append(vm.guest.ipAddress)
    return _unique(addresses)


def vm_provisioned_gb(vm):
    storage = vm.summary.storage
    return (storage.committed + storage.uncommitted) / GB


def vm_folder_path(vm):
    # Walk up to the datacenter's hidden "vm" root folder, which is not part of the path
    names = []
    folder = vm.parent
    while folder is not None and not _is_datacenter(folder.parent):
        names.append(folder.name)
        folder = folder.parent
    return "/".join(reversed(names)) or "/"


def vm_schema():
    return Schema("VM", VMRecord, (
        Field("name", "Name", lambda vm: vm.name),
        Field("power_state", "PowerState", lambda vm: PowerState.from_vim(vm.runtime.powerState)),
        Field("num_cpu", "NumCPU", lambda vm: vm.config.hardware.numCPU),
        Field("memory_gb", "MemoryGB", lambda vm: vm.config.hardware.memoryMB / 1024, numeric=True),
        Field("provisioned_gb", "ProvisionedSpaceGB", vm_provisioned_gb, numeric=True),
        Field("used_gb", "UsedSpaceGB", lambda vm: vm.summary.storage.committed / GB, numeric=True),
        Field("guest_os", "GuestOS", lambda vm: vm.summary.config.guestFullName),
        Field("host", "Host", lambda vm: vm.runtime.host.name),
        Field("cluster", "Cluster", vm_cluster),
        Field("datastores", "Datastores", vm_datastores),
        Field("tools_status", "ToolsStatus", lambda vm: str(vm.guest.toolsStatus)),
        Field("ip_addresses", "IPAddresses", vm_ip_addresses),
        Field("created", "CreateDate", lambda vm: vm.config.createDate.isoformat()),
        Field("hardware_version", "HardwareVersion", lambda vm: vm.config.version),
        Field("folder", "Folder", vm_folder_path),
        Field("notes", "Notes", lambda vm: vm.config.annotation),
    ))


# --- Host accessors ---
def host_management_ip(host):
    for net_config in host.config.virtualNicManagerInfo.netConfig:
        if net_config.nicType != "management":
            continue
        selected = net_config.selectedVnic or []
        for vnic in net_config.candidateVnic or []:
            if any(key.endswith(vnic.key) for key in selected):
                return vnic.spec.ip.ipAddress
    # Fall back to the first VMkernel adapter
    return host.config.network.vnic[0].spec.ip.ipAddress


def host_schema(license_lookup):
    return Schema("Host", HostRecord, (
        Field("name", "Name", lambda h: h.name),
        Field("connection_state", "ConnectionState", lambda h: str(h.runtime.connectionState)),
        Field("version", "Version", lambda h: h.config.product.version),
        Field("build", "Build", lambda h: h.config.product.build),
        Field("cpu_model", "CPUModel", lambda h: h.summary.hardware.cpuModel),
        Field("cpu_cores", "CPUCores", lambda h: h.summary.hardware.numCpuCores),
        Field("memory_gb", "MemoryGB", lambda h: h.summary.hardware.memorySize / GB, numeric=True),
        Field("nic_count", "PhysicalNICs", lambda h: len(h.config.network.pnic)),
        Field("vswitch_count", "VirtualSwitches", lambda h: len(h.config.network.vswitch)),
        Field("vmotion_enabled", "VMotionEnabled", lambda h: bool(h.summary.config.vmotionEnabled)),
        Field("management_ip", "ManagementIP", host_management_ip),
        Field("manufacturer", "Manufacturer", lambda h: h.hardware.systemInfo.vendor),
        Field("model", "Model", lambda h: h.hardware.systemInfo.model),
        Field("license_key", "LicenseKey", license_lookup),
    ))


# --- Datastore accessors ---
def datastore_percent_free(ds):
    return ds.summary.freeSpace / ds.summary.capacity * 100


def datastore_schema():
    return Schema("Datastore", DatastoreRecord, (
        Field("name", "Name", lambda ds: ds.name),
        Field("type", "Type", lambda ds: ds.summary.type),
        Field("capacity_gb", "CapacityGB", lambda ds: ds.summary.capacity / GB, numeric=True),
        Field("free_gb", "FreeSpaceGB", lambda ds: ds.summary.freeSpace / GB, numeric=True),
        Field("used_gb", "UsedSpaceGB",
              lambda ds: (ds.summary.capacity - ds.summary.freeSpace) / GB, numeric=True),
        Field("percent_free", "PercentFree", datastore_percent_free, numeric=True),
        Field("accessible", "Accessible", lambda ds: bool(ds.summary.accessible)),
        Field("host_count", "HostCount", lambda ds: len(ds.host)),
    ))
