"""Quota telemetry: credential-keyed cache, endpoint probing and failover."""

from ccline.quota.cache import QuotaCache, default_cache_path
from ccline.quota.client import QuotaClient, QuotaFetchError, parse_quota_response
from ccline.quota.endpoints import DEFAULT_ENDPOINTS, order_endpoints
from ccline.quota.monitor import QuotaMonitor, probe_endpoints

__all__ = [
    "DEFAULT_ENDPOINTS",
    "QuotaCache",
    "QuotaClient",
    "QuotaFetchError",
    "QuotaMonitor",
    "default_cache_path",
    "order_endpoints",
    "parse_quota_response",
    "probe_endpoints",
]
