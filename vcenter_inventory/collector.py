import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext

from vcenter_inventory.errors import ConfigurationError
from vcenter_inventory.extract import build_record

logger = logging.getLogger(__name__)


def batched(items, size):
    if size <= 0:
        raise ConfigurationError(f"Batch size must be greater than 0, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _collect_batch(batch, schema, lock):
    records = []
    for entity in batch:
        with lock or nullcontext():
            records.append(build_record(entity, schema))
    return records


def collect(entities, batch_size, schema, workers=1, lock=None):
    """Build one record per entity, batch by batch, preserving input order.

    With ``workers > 1`` batches run concurrently; pass ``lock`` to serialize
    access to a connection that is not safe for concurrent use.
    """
    entities = list(entities)
    batches = list(batched(entities, batch_size))
    total = len(batches)
    logger.info(f"Collecting {len(entities)} {schema.kind} entities in {total} batch(es) of up to {batch_size}")

    results = [None] * total
    if workers <= 1 or total <= 1:
        for index, batch in enumerate(batches):
            logger.info(f"{schema.kind} batch {index + 1}/{total}: {len(batch)} entities")
            results[index] = _collect_batch(batch, schema, lock)
    else:
        with ThreadPoolExecutor(max_workers=min(workers, total)) as executor:
            future_to_index = {
                executor.submit(_collect_batch, batch, schema, lock): index
                for index, batch in enumerate(batches)
            }
            for future, index in future_to_index.items():
                results[index] = future.result()
                logger.info(f"{schema.kind} batch {index + 1}/{total}: {len(results[index])} entities")

    records = [record for batch_records in results for record in batch_records]
    logger.info(f"Collected {len(records)} {schema.kind} records")
    return records
