class InventoryError(Exception):
    """Base class for fatal inventory run errors."""


class ConfigurationError(InventoryError):
    pass


class ConnectivityError(InventoryError):
    def __init__(self, message, attempts):
        super().__init__(message)
        self.attempts = attempts


class EnumerationFault(InventoryError):
    def __init__(self, kind, message):
        super().__init__(f"Failed to enumerate {kind} entities: {message}")
        self.kind = kind


class FieldExtractionFault(InventoryError):
    """A single field could not be read. Absorbed into the sentinel, never fatal."""

    def __init__(self, field_name, cause):
        super().__init__(f"{field_name}: {cause}")
        self.field_name = field_name
        self.cause = cause


class ExportFault(InventoryError):
    def __init__(self, artifact, cause):
        super().__init__(f"Failed to write {artifact}: {cause}")
        self.artifact = artifact
