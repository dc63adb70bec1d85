"""Error taxonomy for snapshot export/import.

``FormatError`` and ``StoreError`` are the two failures an import caller has
to tell apart ("invalid file" vs "import failed").  ``CollectionReadError``
never escapes an export; it is carried inside a degraded ``CollectionRead``.
"""


class SnapshotError(Exception):
    """Base class for all snapshot engine errors."""

    pass


class FormatError(SnapshotError):
    """Raised when a snapshot document is not well-formed.

    Always raised before any store access.
    """

    pass


class UnsupportedVersionError(FormatError):
    """Raised when a snapshot declares a major version this engine can't apply."""

    def __init__(self, version: str, supported_major: int):
        self.version = version
        self.supported_major = supported_major
        super().__init__(
            f"Unsupported snapshot version '{version}' "
            f"(expected {supported_major}.x)"
        )


class CollectionReadError(SnapshotError):
    """A single collection could not be read during export."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"Could not export collection '{collection}': {message}")


class StoreError(SnapshotError):
    """Raised when the import transaction failed and was rolled back."""

    pass
