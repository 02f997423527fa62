"""
Configuration settings for seam_rpc endpoints
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class AdapterType(Enum):
    """Supported transports"""
    LOCAL = "local"
    HTTP = "http"
    ZEROMQ = "zeromq"


def _parse_headers(raw: Optional[str]) -> Dict[str, str]:
    """Parse ``key=value;key2=value2``"""
    headers = {}
    for item in (raw or "").split(";"):
        if "=" not in item:
            continue
        key, value = item.split("=", 1)
        if key.strip():
            headers[key.strip()] = value.strip()
    return headers


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RpcConfig:
    """Transport and telemetry settings for a client or a server"""
    adapter: AdapterType = AdapterType.ZEROMQ
    endpoint: str = "tcp://localhost:5555"  # where clients send requests
    bind_address: str = "tcp://*:5555"  # where servers listen
    timeout_ms: int = 5000
    headers: Dict[str, str] = field(default_factory=dict)

    # Tracing configuration
    enable_tracing: bool = False
    service_name: str = "seam_rpc"
    otlp_endpoint: str = "localhost:4317"

    @classmethod
    def from_env(cls) -> "RpcConfig":
        """Create config from environment variables"""
        adapter = os.getenv("SEAM_RPC_ADAPTER", AdapterType.ZEROMQ.value)
        try:
            adapter_type = AdapterType(adapter.lower())
        except ValueError:
            raise ValueError(f"Unsupported adapter: {adapter}")

        defaults = cls()
        return cls(
            adapter=adapter_type,
            endpoint=os.getenv("SEAM_RPC_ENDPOINT", defaults.endpoint),
            bind_address=os.getenv("SEAM_RPC_BIND_ADDRESS", defaults.bind_address),
            timeout_ms=int(os.getenv("SEAM_RPC_TIMEOUT_MS", str(defaults.timeout_ms))),
            headers=_parse_headers(os.getenv("SEAM_RPC_HEADERS")),
            enable_tracing=_parse_bool(os.getenv("SEAM_RPC_ENABLE_TRACING"), defaults.enable_tracing),
            service_name=os.getenv("SEAM_RPC_SERVICE_NAME", defaults.service_name),
            otlp_endpoint=os.getenv("SEAM_RPC_OTLP_ENDPOINT", defaults.otlp_endpoint),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "adapter": self.adapter.value,
            "endpoint": self.endpoint,
            "bind_address": self.bind_address,
            "timeout_ms": self.timeout_ms,
            "headers": dict(self.headers),
            "enable_tracing": self.enable_tracing,
            "service_name": self.service_name,
            "otlp_endpoint": self.otlp_endpoint,
        }
