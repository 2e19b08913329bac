"""HTTP transport for chunk uploads."""
from .aiohttp_transport import AiohttpTransport
from .config import TransportConfig, TimeoutConfig, SSLConfig, ProxyConfig
from .models import TransportResponse

__all__ = [
    'AiohttpTransport',
    'TransportConfig',
    'TimeoutConfig',
    'SSLConfig',
    'ProxyConfig',
    'TransportResponse',
]
