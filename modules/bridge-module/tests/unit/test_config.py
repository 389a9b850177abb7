import pytest

from src.config import BridgeConfig


class TestFromEnv:
    def test_defaults_when_environment_is_empty(self) -> None:
        config = BridgeConfig.from_env({})
        assert config.nats_url == "nats://127.0.0.1:4222"
        assert config.port == 8081
        assert config.max_reconnect_attempts == 60
        assert config.stop_timeout_s == 30.0

    def test_reads_overrides(self) -> None:
        config = BridgeConfig.from_env(
            {
                "NATS_URL": "nats://bus:4222",
                "PORT": "9000",
                "NATS_MAX_RECONNECT": "3",
                "NATS_RECONNECT_WAIT_S": "0.5",
                "STOP_TIMEOUT_S": "10",
            }
        )
        assert config.nats_url == "nats://bus:4222"
        assert config.port == 9000
        assert config.max_reconnect_attempts == 3
        assert config.reconnect_time_wait_s == 0.5
        assert config.stop_timeout_s == 10.0

    def test_blank_values_fall_back_to_defaults(self) -> None:
        config = BridgeConfig.from_env({"NATS_URL": "", "PORT": "  "})
        assert config.nats_url == "nats://127.0.0.1:4222"
        assert config.port == 8081

    def test_invalid_port_names_the_variable(self) -> None:
        with pytest.raises(ValueError, match="PORT"):
            BridgeConfig.from_env({"PORT": "eighty"})


class TestReconnectOptions:
    def test_options_carry_reconnect_policy(self) -> None:
        config = BridgeConfig(max_reconnect_attempts=3, reconnect_time_wait_s=1.5, pending_size=1024)
        options = config.reconnect_options()
        assert options.max_reconnect_attempts == 3
        assert options.reconnect_time_wait == 1.5
        assert options.pending_size == 1024
