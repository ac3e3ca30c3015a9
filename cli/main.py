"""CLI entry point."""

import os
import sys
from typing import Optional

from common.logging_config import setup_logging
from cli.commands import get_client
from cli.repl import repl_loop


def _pop_option(argv: list[str], flag: str) -> Optional[str]:
    if flag not in argv:
        return None
    index = argv.index(flag)
    if index + 1 >= len(argv):
        sys.exit(f"{flag} requires a value")
    value = argv[index + 1]
    del argv[index:index + 2]
    return value


def main() -> None:
    """
    Entry point for CLI.

    Options:
        --debug                 Log at DEBUG level (default: LOG_LEVEL env var or WARNING)
        --registry HOST:PORT    Point the saved config at another registry before starting
    """
    debug = '--debug' in sys.argv
    if debug:
        sys.argv.remove('--debug')
    registry = _pop_option(sys.argv, '--registry')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if registry is not None:
        host, _, port = registry.rpartition(':')
        if not host or not port.isdigit():
            sys.exit(f"--registry expects HOST:PORT, got '{registry}'")
        client = get_client()
        client.config.set_registry_address(host, int(port))
        client.reconnect()
        logger.info(f"Registry address set from command line [base_url={client.config.get_base_url()}]")

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
