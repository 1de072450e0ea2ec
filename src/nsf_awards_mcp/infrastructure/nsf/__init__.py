"""
NSF Awards API access.

- gateway: HttpGateway (httpx, retry/backoff, error classification, hooks)
- parser: ResponseParser (JSON or XML bodies)
"""

from .gateway import (
    AWARDS_PATH,
    DEFAULT_BASE_URL,
    GatewayEvent,
    GatewayHook,
    HttpGateway,
    award_path,
    outcomes_path,
)
from .parser import ResponseParser, xml_to_dict

__all__ = [
    "AWARDS_PATH",
    "DEFAULT_BASE_URL",
    "GatewayEvent",
    "GatewayHook",
    "HttpGateway",
    "ResponseParser",
    "award_path",
    "outcomes_path",
    "xml_to_dict",
]
