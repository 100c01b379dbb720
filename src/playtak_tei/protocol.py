"""Protocol constants and line handling for both sides of the bridge.

Handles:
- PlayTak server defaults, banners and replies
- TEI engine commands and replies
- Line framing helpers
"""

from __future__ import annotations

# =============================================================================
# PlayTak Server
# =============================================================================

DEFAULT_HOST: str = "playtak.com"
DEFAULT_PORT: int = 10000
DEFAULT_CLIENT_NAME: str = "playtak-tei"

# Keepalive interval
DEFAULT_PING_INTERVAL: float = 30.0  # seconds
PING_MESSAGE: str = "PING\n"

WELCOME_BANNER: str = "Welcome!"
LOGIN_BANNER: str = "Login or Register"
OK_REPLY: str = "OK"
NOK_REPLY: str = "NOK"
AUTH_FAILURE_REPLY: str = "Authentication failure"
WELCOME_PREFIX: str = "Welcome"
SEEK_ANNOUNCEMENT_PREFIX: str = "Seek new"
RESUMED_MESSAGE: str = "Message Your game is resumed"
QUIT_MESSAGE: str = "quit\n"

# =============================================================================
# TEI Engine
# =============================================================================

TEI_HANDSHAKE: str = "tei\n"
TEI_READY: str = "teiok"
ENGINE_NAME_PREFIX: str = "id name "
DEFAULT_ENGINE_NAME: str = "TEI engine"
BESTMOVE_PREFIX: str = "bestmove"


# =============================================================================
# Line Helpers
# =============================================================================


def normalize_line(line: str) -> str:
    """Ensure a line ends with exactly one newline.

    Args:
        line: The line to normalize

    Returns:
        The line with a trailing newline, or "" for an empty line
    """
    stripped = line.rstrip("\n\r")
    if not stripped:
        return ""
    return stripped + "\n"


def game_tag(game_id: int) -> str:
    """Prefix the server puts on every message about game ``game_id``."""
    return f"Game#{game_id}"


def client_message(name: str) -> str:
    return f"Client {name}\n"


def accept_message(seek_id: int) -> str:
    return f"Accept {seek_id}\n"
