class SheetSyncError(Exception):
    pass


class StructuralMismatch(SheetSyncError):
    """Sheet has no usable time axis or is smaller than its known layout."""


class SourceUnavailable(SheetSyncError):
    """Spreadsheet could not be fetched (not shared, not found, network)."""


class PersistenceFailure(SheetSyncError):
    """A delete / insert / upsert / update against the store failed."""
