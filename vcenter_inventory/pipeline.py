import logging
import threading
import time
from enum import Enum

from vcenter_inventory import retry
from vcenter_inventory.aggregate import aggregate, summary_rows
from vcenter_inventory.collector import collect
from vcenter_inventory.errors import ExportFault, InventoryError
from vcenter_inventory.export import (
    write_html_report,
    write_json_inventory,
    write_summary_csv,
    write_table_csv,
)

logger = logging.getLogger(__name__)

ENTITY_KINDS = ("vm", "host", "datastore")
TABLE_FILES = {"vm": "VMs.csv", "host": "Hosts.csv", "datastore": "Datastores.csv"}


class RunState(Enum):
    IDLE = "Idle"
    CONNECTING = "Connecting"
    COLLECTING = "Collecting"
    AGGREGATING = "Aggregating"
    EXPORTING = "Exporting"
    DISCONNECTING = "Disconnecting"
    DONE = "Done"
    FAILED = "Failed"


class InventoryPipeline:
    """Connect, collect, aggregate, export and disconnect for a single run."""

    def __init__(self, config, context, source, sleep=None):
        self.config = config
        self.context = context
        self.source = source
        self.sleep = sleep or time.sleep
        self.state = RunState.IDLE
        self.history = [RunState.IDLE]
        self.connection = None
        self.schemas = {}
        self.records = {}
        self.summary = None
        self.failed_exports = []
        self._connected = False

    def _enter(self, state):
        logger.debug(f"Run state {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def run(self):
        failed = False
        try:
            self._connect()
            self._collect()
            self._enter(RunState.AGGREGATING)
            self.summary = aggregate(self.records["vm"], self.records["host"], self.records["datastore"])
            self._enter(RunState.EXPORTING)
            self._export()
        except InventoryError as e:
            failed = True
            logger.error(f"Inventory run failed during {self.state.value}: {e}")
        except Exception as e:
            failed = True
            logger.error(f"Unhandled error during {self.state.value}: {e}", exc_info=True)
        finally:
            self._disconnect()

        self._enter(RunState.FAILED if failed else RunState.DONE)
        if not failed:
            self._log_summary()
        return not failed

    def _connect(self):
        self._enter(RunState.CONNECTING)
        retry.execute(
            self.source.connect,
            self.config.retry_count,
            self.config.retry_delay,
            description=f"Connection to {self.config.endpoint}",
            sleep=self.sleep,
        )
        self._connected = True
        self.connection = self.source.describe()
        logger.info(f"Server version {self.connection.server_version} build {self.connection.server_build}, "
                    f"user {self.connection.user}")

    def _collect(self):
        self._enter(RunState.COLLECTING)
        lock = threading.Lock() if self.config.workers > 1 else None
        for kind in ENTITY_KINDS:
            entities = self.source.list_entities(kind)
            logger.info(f"Found {len(entities)} {kind} entities")
            self.schemas[kind] = self.source.schema(kind)
            self.records[kind] = collect(
                entities,
                self.config.batch_size,
                self.schemas[kind],
                workers=self.config.workers,
                lock=lock,
            )

    def record_sets(self):
        return [(self.schemas[kind], self.records[kind]) for kind in ENTITY_KINDS]

    def _export(self):
        record_sets = self.record_sets()
        exports = [
            (TABLE_FILES[kind], write_table_csv, (self.records[kind], self.schemas[kind]))
            for kind in ENTITY_KINDS
        ]
        exports += [
            ("Summary.csv", write_summary_csv, (self.summary,)),
            ("Report.html", write_html_report, (record_sets, self.summary, self.connection, self.context)),
            ("Inventory.json", write_json_inventory, (record_sets, self.summary, self.connection)),
        ]
        for name, writer, args in exports:
            try:
                writer(*args, self.context.artifact(name))
            except Exception as e:
                fault = ExportFault(name, e)
                self.failed_exports.append(name)
                logger.error(str(fault), exc_info=True)

    def _disconnect(self):
        if not self._connected:
            return
        self._enter(RunState.DISCONNECTING)
        try:
            self.source.disconnect()
        except Exception as e:
            logger.warning(f"Error during disconnect from {self.config.endpoint}: {e}")

    def _log_summary(self):
        lines = ["=" * 50, f" Inventory summary for {self.config.endpoint}", "=" * 50]
        lines += [f" {label:<32} {value}" for label, value in summary_rows(self.summary)]
        if self.failed_exports:
            lines.append(f" Failed exports: {', '.join(self.failed_exports)}")
        lines += [f" Output: {self.context.run_dir}", "=" * 50]
        for line in lines:
            logger.info(line)
