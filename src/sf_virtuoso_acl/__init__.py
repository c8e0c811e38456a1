from .common.config import ConfigManager, Settings
from .common.exceptions import (
    ConfigurationError,
    ErrorCode,
    InvalidStateError,
    PlatformError,
    QueryExecutionError,
    RepositoryConnectionError,
    RepositoryStateError,
    UnsupportedOperationError,
)
from .connection import RDFClient, RDFLibStoreClient, ResultCursor, VirtuosoHTTPClient, VirtuosoSQLClient, create_client
from .converter import RDFFormat, ResultMapper
from .graph import GraphView, NamedGraphManager
from .loader import BulkImportResult, BulkLoader, FileTransfer
from .query import NamespaceTable, PrefixBlock, SPARQLSanitizer, StatementBuilder
from .repository import RepositoryState, VirtuosoRepository
from .transaction import TripleString, TripleType, TripleWriter, WriteResult

__all__ = [
    "ConfigManager",
    "Settings",
    "ConfigurationError",
    "ErrorCode",
    "InvalidStateError",
    "PlatformError",
    "QueryExecutionError",
    "RepositoryConnectionError",
    "RepositoryStateError",
    "UnsupportedOperationError",
    "RDFClient",
    "RDFLibStoreClient",
    "ResultCursor",
    "VirtuosoHTTPClient",
    "VirtuosoSQLClient",
    "create_client",
    "RDFFormat",
    "ResultMapper",
    "GraphView",
    "NamedGraphManager",
    "BulkImportResult",
    "BulkLoader",
    "FileTransfer",
    "NamespaceTable",
    "PrefixBlock",
    "SPARQLSanitizer",
    "StatementBuilder",
    "RepositoryState",
    "VirtuosoRepository",
    "TripleString",
    "TripleType",
    "TripleWriter",
    "WriteResult",
]
