"""Supabase cache for website analyses."""

import logging
from datetime import datetime, timezone
from typing import Optional

from supabase import create_client, Client

from config import settings

logger = logging.getLogger("pitch_builder")

TABLE = "website_analyses"


class AnalysisCache:
    """Thin wrapper around Supabase keyed on the normalized website URL.

    Disabled (every lookup misses, every write is a no-op) when no Supabase
    URL/key is configured.
    """

    def __init__(self, client: Optional[Client] = None):
        if client is not None:
            self.client: Optional[Client] = client
        elif settings.supabase_url and settings.supabase_key:
            self.client = create_client(settings.supabase_url, settings.supabase_key)
        else:
            self.client = None

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def get_cached_analysis(self, website: str) -> Optional[dict]:
        """Return the cached ProductInfo dict for a website, or None."""
        if not self.enabled:
            return None
        try:
            result = (
                self.client.table(TABLE)
                .select("product_info")
                .eq("website", website)
                .execute()
            )
            if result.data:
                return result.data[0]["product_info"]
        except Exception as e:
            logger.warning(f"Cache lookup failed for {website}: {e}")
        return None

    def upsert_analysis(self, website: str, product_info: dict) -> None:
        """Insert or update the analysis row for ``website``."""
        if not self.enabled:
            return
        try:
            self.client.table(TABLE).upsert(
                {
                    "website": website,
                    "product_info": product_info,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
                on_conflict="website",
            ).execute()
        except Exception as e:
            logger.warning(f"Cache upsert failed for {website}: {e}")
