"""Bridge configuration.

All settings come from environment variables; see ``BridgeConfig.from_env``.
"""

import os
from dataclasses import dataclass
from typing import Callable, Mapping

from bridge_base.bus import DEFAULT_URL, ReconnectOptions

DEFAULT_PORT = 8081
DEFAULT_HOST = "0.0.0.0"
STOP_TIMEOUT_S = 30.0


def _parse(environ: Mapping[str, str], name: str, cast: Callable, default):
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


@dataclass(frozen=True)
class BridgeConfig:
    nats_url: str = DEFAULT_URL
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    max_reconnect_attempts: int = 60
    reconnect_time_wait_s: float = 2.0
    connect_timeout_s: float = 2.0
    pending_size: int = 2 * 1024 * 1024
    initial_connect_timeout_s: float = 5.0
    stop_timeout_s: float = STOP_TIMEOUT_S

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BridgeConfig":
        """Read configuration from the environment.

        Raises:
            ValueError: If a variable is set but cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            nats_url=env.get("NATS_URL", "").strip() or defaults.nats_url,
            port=_parse(env, "PORT", int, defaults.port),
            host=env.get("HTTP_HOST", "").strip() or defaults.host,
            max_reconnect_attempts=_parse(env, "NATS_MAX_RECONNECT", int, defaults.max_reconnect_attempts),
            reconnect_time_wait_s=_parse(env, "NATS_RECONNECT_WAIT_S", float, defaults.reconnect_time_wait_s),
            connect_timeout_s=_parse(env, "NATS_CONNECT_TIMEOUT_S", float, defaults.connect_timeout_s),
            pending_size=_parse(env, "NATS_PENDING_SIZE", int, defaults.pending_size),
            initial_connect_timeout_s=_parse(
                env, "NATS_INITIAL_CONNECT_TIMEOUT_S", float, defaults.initial_connect_timeout_s
            ),
            stop_timeout_s=_parse(env, "STOP_TIMEOUT_S", float, defaults.stop_timeout_s),
        )

    def reconnect_options(self) -> ReconnectOptions:
        return ReconnectOptions(
            max_reconnect_attempts=self.max_reconnect_attempts,
            reconnect_time_wait=self.reconnect_time_wait_s,
            connect_timeout=self.connect_timeout_s,
            pending_size=self.pending_size,
            initial_connect_timeout=self.initial_connect_timeout_s,
        )
