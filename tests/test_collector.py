import logging
import threading

import pytest

from vcenter_inventory.collector import batched, collect
from vcenter_inventory.errors import ConfigurationError
from vcenter_inventory.extract import SENTINEL

from conftest import row_schema


def entities(n):
    return [{"name": f"e{i}", "size": i / 3} for i in range(n)]


def test_batched_sizes():
    assert [len(b) for b in batched(list(range(450)), 200)] == [200, 200, 50]
    assert list(batched([], 10)) == []


@pytest.mark.parametrize("size", [0, -5])
def test_batched_rejects_non_positive_size(size):
    with pytest.raises(ConfigurationError):
        list(batched([1, 2, 3], size))


def test_collect_rejects_non_positive_batch_size():
    with pytest.raises(ConfigurationError):
        collect(entities(3), 0, row_schema())


@pytest.mark.parametrize("batch_size", [1, 2, 7, 200, 1000])
def test_partition_invariance(batch_size):
    items = entities(23)
    unbatched = collect(items, len(items), row_schema())
    batched_records = collect(items, batch_size, row_schema())
    assert len(batched_records) == 23
    assert [r.name for r in batched_records] == [f"e{i}" for i in range(23)]
    assert batched_records == unbatched


def test_batch_progress_logged(caplog):
    caplog.set_level(logging.INFO)
    records = collect(entities(450), 200, row_schema())
    assert len(records) == 450
    batch_lines = [r.getMessage() for r in caplog.records if " batch " in r.getMessage()]
    assert batch_lines == [
        "Row batch 1/3: 200 entities",
        "Row batch 2/3: 200 entities",
        "Row batch 3/3: 50 entities",
    ]


def test_parallel_batches_preserve_order():
    items = entities(101)
    sequential = collect(items, 10, row_schema())
    parallel = collect(items, 10, row_schema(), workers=4, lock=threading.Lock())
    assert parallel == sequential


def test_fault_isolation_across_batches():
    def sometimes(entity):
        if entity["name"].endswith("3"):
            raise KeyError("guest")
        return "ok"

    records = collect(entities(15), 4, row_schema(extra_accessor=sometimes))
    assert len(records) == 15
    assert records[3].extra == SENTINEL
    assert records[13].extra == SENTINEL
    assert records[4].extra == "ok"
    assert all(r.name == f"e{i}" for i, r in enumerate(records))


def test_empty_entity_list():
    assert collect([], 200, row_schema()) == []
