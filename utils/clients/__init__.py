# Clients subpackage - External API clients
from .anthropic import call_anthropic_api_with_retry, get_anthropic_client
from .apify import ApifyClient, ApifyError, get_apify_client, close_apify_client
from .browserbase import (
    BrowserbaseClient,
    BrowserbaseError,
    get_browserbase_client,
    close_browserbase_client,
)

__all__ = [
    "call_anthropic_api_with_retry",
    "get_anthropic_client",
    "ApifyClient",
    "ApifyError",
    "get_apify_client",
    "close_apify_client",
    "BrowserbaseClient",
    "BrowserbaseError",
    "get_browserbase_client",
    "close_browserbase_client",
]
