"""heliotrope: Solr client with a schema-less document model and typed response decoding."""

from heliotrope.client import SolrClient
from heliotrope.config import SolrConfig
from heliotrope.document import Document, Field, FieldKind, FieldValue
from heliotrope.logging import bind_request_id, configure_logging, get_request_id
from heliotrope.models import (
    SolrConnectionError,
    SolrError,
    SolrParseError,
    SolrQuery,
    SolrQueryResponse,
    SolrResponseError,
    SolrServerError,
    SolrUpdateResponse,
)
from heliotrope.response import (
    decode_error_response,
    decode_query_response,
    decode_update_response,
)

__version__ = "0.1.0"

__all__ = [
    "Document",
    "Field",
    "FieldKind",
    "FieldValue",
    "SolrClient",
    "SolrConfig",
    "SolrConnectionError",
    "SolrError",
    "SolrParseError",
    "SolrQuery",
    "SolrQueryResponse",
    "SolrResponseError",
    "SolrServerError",
    "SolrUpdateResponse",
    "__version__",
    "bind_request_id",
    "configure_logging",
    "decode_error_response",
    "decode_query_response",
    "decode_update_response",
    "get_request_id",
]
