"""Entry point for the PlayTak TEI bridge.

Usage:
    python -m playtak_tei list
    python -m playtak_tei accept -o someone -- ./engine --tei
    python -m playtak_tei seek -s 6 -u name -p secret -- ./engine

Environment Variables:
    PLAYTAK_SERVER_HOST: PlayTak server host (default: playtak.com)
    PLAYTAK_SERVER_PORT: PlayTak server port (default: 10000)
    PLAYTAK_CLIENT_NAME: Name sent with the Client command (default: playtak-tei)
    PLAYTAK_PING_INTERVAL: Seconds between keepalive pings (default: 30)
    PLAYTAK_LOG_LEVEL: Logging level (default: INFO)
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from playtak_tei.cli import parse_command_line
from playtak_tei.config import get_config
from playtak_tei.errors import BridgeError
from playtak_tei.relay import Relay

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    login, mode, engine_command = parse_command_line(argv)

    try:
        config = get_config()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    config.setup_logging()
    logger.debug("Configuration: %s", config.to_dict())

    relay = Relay(
        login=login.to_login_string(),
        mode=mode,
        engine_command=engine_command,
        host=config.server_host,
        port=config.server_port,
        client_name=config.client_name,
        ping_interval=config.ping_interval,
    )

    try:
        asyncio.run(relay.run())
        return 0
    except KeyboardInterrupt:
        return 0
    except BridgeError as e:
        logger.error("Relay failed: %s", e)
        return 1
    except OSError as e:
        logger.error("Relay I/O error: %s", e)
        return 1
    except Exception as e:
        logger.error("Relay error: %s", e, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
