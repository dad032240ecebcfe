"""Startup reconciliation of the sparse unique slug index."""

import logging
from dataclasses import dataclass

from supabase import Client

logger = logging.getLogger(__name__)

SLUG_INDEX_NAME = "slug_1"


@dataclass
class SupabaseSlugIndexReconciler:
    """Replaces a non-sparse slug index with a sparse unique one.

    Relies on the RPC helpers defined in the ``photobooth_sessions`` migration.
    Safe to run on every startup: a correct index is left untouched.
    """

    client: Client

    def reconcile(self) -> bool:
        """Ensure the slug index is sparse-unique; return true if it changed."""
        definition = self._index_definitions().get(SLUG_INDEX_NAME)
        if definition is not None and is_sparse_unique(definition):
            return False
        if definition is not None:
            logger.info("Dropping non-sparse slug index %s", SLUG_INDEX_NAME)
            self.client.rpc(
                "photobooth_drop_session_index", {"index_name": SLUG_INDEX_NAME}
            ).execute()
        self.client.rpc(
            "photobooth_create_sparse_slug_index", {"index_name": SLUG_INDEX_NAME}
        ).execute()
        logger.info("Created sparse unique slug index %s", SLUG_INDEX_NAME)
        return True

    def _index_definitions(self) -> dict[str, str]:
        response = self.client.rpc("photobooth_session_indexes", {}).execute()
        rows = response.data or []
        return {
            str(row["indexname"]): str(row["indexdef"])
            for row in rows
            if isinstance(row, dict) and row.get("indexname")
        }


def is_sparse_unique(index_definition: str) -> bool:
    """Return true for a unique index that skips rows without a slug."""
    normalized = " ".join(index_definition.lower().split())
    return (
        normalized.startswith("create unique index")
        and "where (slug is not null)" in normalized
    )
