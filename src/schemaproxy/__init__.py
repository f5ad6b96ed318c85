"""SchemaProxy - schema-synchronizing proxy for a document-storage backend.

Keeps a file-based schema descriptor per collection consistent with the
backend's live schema and forwards document writes to the backend.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
