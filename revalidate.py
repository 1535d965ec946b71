import logging

from flask_caching import Cache

log = logging.getLogger(__name__)

cache = Cache()

# Key format used by ``cache.cached`` for views; revalidation relies on it.
VIEW_KEY = "view/%s"

INVOICES_PATH = "/dashboard/invoices"


class PathRevalidator:
    """Marks the cached output of a logical path as stale."""

    def __init__(self, backend=None):
        self.backend = backend if backend is not None else cache

    def revalidate_path(self, path: str) -> None:
        log.debug("Revalidating %s", path)
        self.backend.delete(VIEW_KEY % path)
