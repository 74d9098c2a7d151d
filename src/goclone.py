"""goclone - re-publish Go modules under a vanity import path.

    Returns:
        int: Exit code
"""
import logging
import sys

from constants import ExitCodes
from common.logging_utils import extra_context, is_debug_enabled
from args import parse_args
from cli_proxy import run_proxy_server


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    run_proxy_server(args)
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
