import logging
from dataclasses import dataclass
from typing import Any, Callable, Tuple

from vcenter_inventory.errors import FieldExtractionFault

logger = logging.getLogger(__name__)

SENTINEL = "N/A"


@dataclass(frozen=True)
class Field:
    name: str
    label: str
    accessor: Callable[[Any], Any]
    numeric: bool = False


@dataclass(frozen=True)
class Schema:
    kind: str
    record_type: type
    fields: Tuple[Field, ...]

    @property
    def columns(self):
        return [f.label for f in self.fields]


def _entity_label(entity):
    # _moId is a local attribute on pyVmomi managed objects; name would be a remote call
    return getattr(entity, "_moId", None) or type(entity).__name__


def _read(entity, field):
    try:
        value = field.accessor(entity)
        if value is None:
            raise ValueError("property not reported")
        if field.numeric:
            value = round(float(value), 2)
        return value
    except Exception as e:
        raise FieldExtractionFault(field.name, e) from e


def extract(entity, field):
    """Evaluate one field accessor, substituting SENTINEL for any failure."""
    try:
        return _read(entity, field)
    except FieldExtractionFault as fault:
        logger.debug(f"Field {fault.field_name} unavailable for {_entity_label(entity)}: {fault.cause}")
        return SENTINEL


def build_record(entity, schema):
    values = {}
    for field in schema.fields:
        values[field.name] = extract(entity, field)
    return schema.record_type(**values)
