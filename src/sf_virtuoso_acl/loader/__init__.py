from sf_virtuoso_acl.loader.bulk import BulkImportResult, BulkLoader
from sf_virtuoso_acl.loader.files import FileTransfer

__all__ = ["BulkImportResult", "BulkLoader", "FileTransfer"]
