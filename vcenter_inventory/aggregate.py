from dataclasses import dataclass

from vcenter_inventory.models import PowerState


@dataclass(frozen=True)
class SummaryStats:
    total_vms: int
    powered_on_vms: int
    total_vm_memory_gb: float
    total_hosts: int
    connected_hosts: int
    total_host_memory_gb: float
    total_datastores: int
    accessible_datastores: int
    total_capacity_gb: float
    total_free_gb: float
    free_percent: float


# Serialization order for Summary.csv and the HTML report
SUMMARY_FIELDS = (
    ("total_vms", "Total VMs"),
    ("powered_on_vms", "Powered On VMs"),
    ("total_vm_memory_gb", "Total VM Memory (GB)"),
    ("total_hosts", "Total Hosts"),
    ("connected_hosts", "Connected Hosts"),
    ("total_host_memory_gb", "Total Host Memory (GB)"),
    ("total_datastores", "Total Datastores"),
    ("accessible_datastores", "Accessible Datastores"),
    ("total_capacity_gb", "Total Datastore Capacity (GB)"),
    ("total_free_gb", "Total Datastore Free (GB)"),
    ("free_percent", "Datastore Free (%)"),
)


def _number(value):
    # Sentinel cells contribute nothing to totals
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return value


def percent(part, whole):
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def aggregate(vms, hosts, datastores):
    powered_on = 0
    vm_memory = 0.0
    for vm in vms:
        if vm.power_state == PowerState.POWERED_ON:
            powered_on += 1
        vm_memory += _number(vm.memory_gb)

    connected = 0
    host_memory = 0.0
    for host in hosts:
        if host.connection_state == "connected":
            connected += 1
        host_memory += _number(host.memory_gb)

    accessible = 0
    capacity = 0.0
    free = 0.0
    for ds in datastores:
        if ds.accessible is True:
            accessible += 1
        capacity += _number(ds.capacity_gb)
        free += _number(ds.free_gb)

    return SummaryStats(
        total_vms=len(vms),
        powered_on_vms=powered_on,
        total_vm_memory_gb=round(vm_memory, 2),
        total_hosts=len(hosts),
        connected_hosts=connected,
        total_host_memory_gb=round(host_memory, 2),
        total_datastores=len(datastores),
        accessible_datastores=accessible,
        total_capacity_gb=round(capacity, 2),
        total_free_gb=round(free, 2),
        free_percent=percent(free, capacity),
    )


def summary_rows(summary):
    return [(label, getattr(summary, attr)) for attr, label in SUMMARY_FIELDS]
