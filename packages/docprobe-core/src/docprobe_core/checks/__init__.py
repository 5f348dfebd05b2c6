from .docs import check_docs, check_examples, check_methods
from .metadata import check_metadata
from .service import check_service

__all__ = ["check_docs", "check_examples", "check_methods", "check_metadata", "check_service"]
