"""
Tests for configuration loading and the command-line parser.
"""

import asyncio
import logging
from unittest.mock import patch

import pytest

from durak_online.cli import build_parser, main
from durak_online.config import ConfigError, ServerConfig, load_config


def test_defaults():
    config = load_config(environ={})

    assert config == ServerConfig()
    assert config.host == "localhost"
    assert config.port == 3000
    assert config.log_level == "INFO"
    assert config.seed is None
    assert config.log_level_number == logging.INFO


def test_environment():
    config = load_config(
        environ={
            "DURAK_HOST": "0.0.0.0",
            "DURAK_PORT": "8080",
            "DURAK_LOG_LEVEL": "debug",
            "DURAK_SEED": "17",
        }
    )

    assert config.host == "0.0.0.0"
    assert config.port == 8080
    assert config.log_level == "DEBUG"
    assert config.seed == 17


def test_generic_port_variable():
    assert load_config(environ={"PORT": "5000"}).port == 5000
    assert load_config(environ={"PORT": "5000", "DURAK_PORT": "6000"}).port == 6000


def test_overrides_win():
    config = load_config(
        {"port": 9000, "host": None}, environ={"DURAK_PORT": "8080", "DURAK_HOST": "h"}
    )

    assert config.port == 9000
    assert config.host == "h"


def test_engine_config():
    config = load_config({"seed": 3, "hand_size": 4}, environ={})

    assert config.engine_config() == {"hand_size": 4, "max_table_slots": 6, "seed": 3}


@pytest.mark.parametrize(
    "overrides",
    [
        {"port": "http"},
        {"port": 70000},
        {"port": True},
        {"seed": "abc"},
        {"log_level": "LOUD"},
        {"hand_size": 0},
        {"colour": "red"},
    ],
)
def test_invalid_values(overrides):
    with pytest.raises(ConfigError):
        load_config(overrides, environ={})


def test_parser():
    args = build_parser().parse_args(["--port", "4000", "--log-level", "DEBUG"])

    assert args.port == 4000
    assert args.log_level == "DEBUG"
    assert args.host is None
    assert args.seed is None


def test_main_builds_server_inside_running_loop():
    """The server and its lobby manager are created on the serving loop."""
    built = []

    class RecordingServer:
        def __init__(self, config):
            built.append((config, asyncio.get_running_loop()))

        async def run(self):
            pass

    with patch("durak_online.cli.WebSocketServer", RecordingServer):
        assert main(["--port", "0", "--host", "127.0.0.1"]) == 0

    [(config, loop)] = built
    assert config.port == 0
    assert config.host == "127.0.0.1"
    assert loop.is_closed()


def test_main_rejects_bad_config(capsys):
    assert main(["--port", "70000"]) == 2
    assert "ERROR" in capsys.readouterr().err
