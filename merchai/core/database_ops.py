"""
Database operations module for Supabase event tables.
Best-effort inserts for login, onboarding and mockup telemetry records.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client, create_client

from merchai.config import logger, SUPABASE_URL, SUPABASE_SERVICE_KEY


class DocumentStore:
    """Destination for guarded writes. Implementations must not raise."""

    async def insert_document(self, collection: str, document: Dict[str, Any]) -> None:
        raise NotImplementedError


class SupabaseDocumentStore(DocumentStore):
    """
    Insert telemetry documents into the Supabase table named after the collection.

    Args:
        url: Supabase project URL (defaults to SUPABASE_URL)
        service_key: Supabase service key (defaults to SUPABASE_SERVICE_KEY)
    """

    def __init__(self, url: Optional[str] = None, service_key: Optional[str] = None):
        self.url = url if url is not None else SUPABASE_URL
        self.service_key = service_key if service_key is not None else SUPABASE_SERVICE_KEY
        self._supabase_client: Optional[Client] = None

    def is_configured(self) -> bool:
        return bool(self.url and self.service_key)

    def log_status(self) -> None:
        if self.is_configured():
            logger.info("Supabase document store initialized")
        else:
            logger.warning(
                "Supabase is not configured. Database inserts will be skipped."
            )

    def _get_supabase_client(self) -> Client:
        """
        Get or create the Supabase client instance.

        Returns:
            Client: Supabase client instance

        Raises:
            ValueError: If the URL or service key is not configured
        """
        if self._supabase_client is None:
            if not self.is_configured():
                error_msg = "SUPABASE_URL or SUPABASE_SERVICE_KEY is not configured"
                logger.error(error_msg)
                raise ValueError(error_msg)

            try:
                self._supabase_client = create_client(self.url, self.service_key)
                logger.info(
                    "Supabase client initialized successfully for event inserts"
                )
            except Exception as e:
                logger.error(f"Failed to initialize Supabase client: {e}")
                raise

        return self._supabase_client

    async def insert_document(self, collection: str, document: Dict[str, Any]) -> None:
        """
        Insert a document, tagging it with a creation timestamp.

        Args:
            collection: Table name (logins, onboarding, mockup_generations, ...)
            document: Validated payload fields

        Failures are logged and swallowed so telemetry never breaks the caller.
        """
        if not self.is_configured():
            logger.warning(
                f"Supabase not configured. Skipping insert into {collection}."
            )
            return

        try:
            client = self._get_supabase_client()

            record_data = {
                **document,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }

            response = client.table(collection).insert(record_data).execute()

            if response.data and len(response.data) > 0:
                logger.info(
                    f"Document inserted into {collection}",
                    extra={"record_id": response.data[0].get("id")},
                )
            else:
                logger.warning(f"Insert may have failed for {collection}")

        except Exception as e:
            logger.error(f"Error inserting into {collection}: {e}")


__all__ = ["DocumentStore", "SupabaseDocumentStore"]
