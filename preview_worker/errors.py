"""Error taxonomy shared by the catalog, capture, enrichment and state adapters."""


class PreviewWorkerError(Exception):
    pass


class CatalogError(PreviewWorkerError):
    """Catalog query or update failed (transport error or non-2xx status)."""


class CaptureError(PreviewWorkerError):
    """Screenshot session failed or timed out."""


class EnrichmentError(PreviewWorkerError):
    """Description generation failed."""


class StoreError(PreviewWorkerError):
    """Retry state store could not be read or written."""


StoreUnavailable = StoreError
