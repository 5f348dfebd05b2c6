from .http_text import parse_http_request, parse_http_response
from .loader import load_accounts, load_app_config, load_docset, load_resource_definitions

__all__ = [
    "load_accounts",
    "load_app_config",
    "load_docset",
    "load_resource_definitions",
    "parse_http_request",
    "parse_http_response",
]
