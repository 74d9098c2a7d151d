"""CLI entry point for the goclone proxy server.

This module wires parsed arguments, the optional YAML configuration file and
the environment into a ProxyConfig, then runs either the HTTP listener or the
Lambda runtime loop.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Optional

import yaml

from constants import Constants, ExitCodes
from common.logging_utils import configure_logging

logger = logging.getLogger(__name__)

# Config file keys and the argument attributes they fill in.
_CONFIG_KEYS = {
    "host": "PUBLIC_HOST",
    "upstream": "UPSTREAM",
    "listen": "LISTEN_HOST",
    "port": "PORT",
    "timeout": "TIMEOUT",
}


def _load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML file.

    Args:
        config_path: Path to YAML config file.

    Returns:
        Settings dict (the ``goclone`` section when present).
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    if not isinstance(data, dict):
        return {}
    section = data.get("goclone", data)
    return section if isinstance(section, dict) else {}


def _apply_config(args: Any, settings: Dict[str, Any]) -> None:
    """Fill arguments not given on the command line from config settings."""
    for key, attr in _CONFIG_KEYS.items():
        if key in settings and getattr(args, attr, None) in (None, ""):
            setattr(args, attr, settings[key])


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    configure_logging(getattr(args, "LOG_LEVEL", None))

    # Add file handler if --logfile specified
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def run_proxy_server(args: Any) -> None:
    """Entry point for the proxy server command.

    Args:
        args: Parsed CLI arguments namespace.
    """
    _setup_logging(args)

    from proxy.server import ProxyConfig, run_proxy_server_sync  # pylint: disable=import-outside-toplevel

    config_path = getattr(args, "CONFIG", None)
    settings = _load_config(config_path)
    if settings:
        logger.info("Loaded config from: %s", config_path)
    _apply_config(args, settings)

    config = ProxyConfig.from_args(args)

    runtime_api = os.environ.get(Constants.ENV_LAMBDA_RUNTIME_API)
    if runtime_api:
        from proxy.lambda_runtime import run_lambda_loop  # pylint: disable=import-outside-toplevel

        logger.info("Running under Lambda runtime API %s", runtime_api)
        run_lambda_loop(config, runtime_api)
        return

    # Print startup banner
    print(
        f"\n"
        f"  goclone\n"
        f"  =======\n"
        f"  Listening: http://{config.listen_host}:{config.port}\n"
        f"  Public host: {config.host}\n"
        f"  Upstream: {config.upstream}\n"
        f"\n"
        f"  Module proxy: {config.proxy_url}\n"
        f"\n"
        f"  Press Ctrl+C to stop\n"
    )

    run_proxy_server_sync(config)
