"""Argument parsing functionality for goclone."""

import argparse
import os

from constants import Constants


def _env_int(name, default):
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def build_parser():
    """Builds the argument parser.

    Defaults for host, upstream, port and log level come from the environment so the
    same image can run as a plain listener or inside a function runtime.
    """
    parser = argparse.ArgumentParser(
        prog="goclone",
        description=(
            "goclone - re-publish Go modules under a vanity import path"
        ),
        add_help=True,
    )

    parser.add_argument("--host",
                        dest="PUBLIC_HOST",
                        help="Public host for vanity imports",
                        action="store", type=str,
                        default=os.environ.get(Constants.ENV_PUBLIC_HOST))
    parser.add_argument("--upstream",
                        dest="UPSTREAM",
                        help="Upstream module proxy URL",
                        action="store", type=str,
                        default=os.environ.get(Constants.ENV_UPSTREAM))
    parser.add_argument("--listen",
                        dest="LISTEN_HOST",
                        help="Address to bind the HTTP listener to",
                        action="store", type=str)
    parser.add_argument("--port",
                        dest="PORT",
                        help="Port to bind the HTTP listener to",
                        action="store", type=int,
                        default=_env_int(Constants.ENV_PORT, None))
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Upstream request timeout in seconds",
                        action="store", type=int)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML or YML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=os.environ.get(Constants.ENV_LOG_LEVEL))
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
