"""Tools exposed to the AI tool-calling layer."""

from .rag import (
    BATCH_ITEM_TEMPLATE,
    HEALTH_REPORT_TEMPLATE,
    QUERY_FAILED_SENTINEL,
    SERVICE_UNAVAILABLE_SENTINEL,
    Endpoint,
    Fallback,
    FallbackReason,
    InvocationResult,
    RagInvoker,
    to_text,
)

__all__ = [
    "BATCH_ITEM_TEMPLATE", "HEALTH_REPORT_TEMPLATE", "QUERY_FAILED_SENTINEL",
    "SERVICE_UNAVAILABLE_SENTINEL", "Endpoint", "Fallback", "FallbackReason",
    "InvocationResult", "RagInvoker", "to_text",
]
