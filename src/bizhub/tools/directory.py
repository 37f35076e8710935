"""Directory lookup tools backed by the content store."""

import json
import logging

from bizhub.config import settings
from bizhub.core.schema import (
    DataResult,
    ToolResult,
)
from bizhub.store.content_store import ContentStoreError
from bizhub.tools import register_tool
from bizhub.tools.host import HostEnvironment

logger = logging.getLogger(__name__)

BUSINESS_TABLE = "businesses"
BUSINESS_SEARCH_FIELDS = ("name", "description")
BUSINESS_COLUMNS = "name,description,category_id,address,phone,email"
NO_MATCHES = "No businesses found matching that query."


@register_tool("findBusiness")
async def find_business(host: HostEnvironment, query: str = "") -> ToolResult:
    """
    Search the database for businesses. Use this to ANSWER questions like "which business is X"
    or "find me a plumber". Params: { "query": "pizza" }
    """
    if host.content_store is None:
        return DataResult(payload="Error: Database not available.")

    try:
        records = await host.content_store.search(
            BUSINESS_TABLE,
            BUSINESS_SEARCH_FIELDS,
            query,
            limit=settings.FIND_BUSINESS_LIMIT,
            columns=BUSINESS_COLUMNS,
        )
    except ContentStoreError as exc:
        logger.warning("Business search for %r failed: %s", query, exc)
        return DataResult(payload=f"Error: {exc}")

    if not records:
        return DataResult(payload=NO_MATCHES)

    logger.info("findBusiness(%r) matched %d record(s)", query, len(records))
    return DataResult(payload=json.dumps(records))
