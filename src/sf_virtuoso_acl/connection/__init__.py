from sf_virtuoso_acl.connection.client import RDFClient, StatementExecutor
from sf_virtuoso_acl.connection.cursor import ResultCursor
from sf_virtuoso_acl.connection.factory import create_client
from sf_virtuoso_acl.connection.http import VirtuosoHTTPClient
from sf_virtuoso_acl.connection.sql import VirtuosoSQLClient
from sf_virtuoso_acl.connection.store import RDFLibStoreClient

__all__ = [
    "RDFClient",
    "StatementExecutor",
    "ResultCursor",
    "create_client",
    "VirtuosoHTTPClient",
    "VirtuosoSQLClient",
    "RDFLibStoreClient",
]
