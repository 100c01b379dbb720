"""Command line for the bridge.

Three subcommands:
- ``list``: print the open seeks
- ``accept``: accept a seek and play it with an engine
- ``seek``: post a seek and play it with an engine

Everything after the options is the engine command, for example:

    playtak-tei seek -s 6 -m 900 -i 10 -- tiltak --tei
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from pydantic import BaseModel, ValidationError, model_validator

from playtak_tei.relay import AcceptSeek, ListSeeks, PostSeek, RunMode
from playtak_tei.seek import Seek, SeekColor


class Login(BaseModel):
    """Credentials for the ``Login`` command.

    Without a username, the client logs in as a guest, optionally reusing
    a guest token to keep the same guest name.
    """

    guest_token: str | None = None
    username: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def validate_credentials(self) -> Login:
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be given together")
        if self.username is not None and self.guest_token is not None:
            raise ValueError("a guest token cannot be combined with a username")
        return self

    def to_login_string(self) -> str:
        if self.username is not None and self.password is not None:
            return f"Login {self.username} {self.password}\n"
        if self.guest_token is not None:
            return f"Login Guest {self.guest_token}\n"
        return "Login Guest\n"


def _add_login_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("login")
    group.add_argument("-t", "--token", dest="guest_token", help="guest token")
    group.add_argument("-u", "--username", help="account name")
    group.add_argument("-p", "--password", help="account password")


def _add_engine_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "engine",
        nargs=argparse.REMAINDER,
        help="engine executable followed by its arguments",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playtak-tei",
        description="Play games on PlayTak with a TEI engine.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="list open seeks")
    _add_login_arguments(list_parser)

    accept_parser = subparsers.add_parser("accept", help="accept an open seek")
    _add_login_arguments(accept_parser)
    target = accept_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("-s", "--seek", dest="seek_id", type=int, help="seek number")
    target.add_argument("-o", "--opponent", help="accept the seek posted by this player")
    _add_engine_argument(accept_parser)

    seek_parser = subparsers.add_parser("seek", help="post a seek")
    _add_login_arguments(seek_parser)
    seek_parser.add_argument("-s", "--size", type=int, required=True, choices=range(3, 9))
    seek_parser.add_argument("-m", "--time", type=int, default=1200, help="seconds per player")
    seek_parser.add_argument("-i", "--increment", type=int, default=20, help="seconds per move")
    seek_parser.add_argument(
        "-c",
        "--color",
        choices=[color.value for color in SeekColor],
        default=SeekColor.RANDOM.value,
    )
    seek_parser.add_argument("-k", "--half-komi", type=int, default=0)
    seek_parser.add_argument("--flatstones", type=int)
    seek_parser.add_argument("--capstones", type=int)
    seek_parser.add_argument("--unrated", action="store_true")
    seek_parser.add_argument("--tournament", action="store_true")
    seek_parser.add_argument("--extra-time-move", type=int)
    seek_parser.add_argument("--extra-time-amount", type=int)
    seek_parser.add_argument("-o", "--opponent", help="only this player may accept")
    _add_engine_argument(seek_parser)

    return parser


def parse_command_line(
    argv: Sequence[str] | None = None,
) -> tuple[Login, RunMode, list[str]]:
    """Parse the command line into credentials, a run mode and an engine command.

    Exits with a usage error on invalid input.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        login = Login(
            guest_token=args.guest_token,
            username=args.username,
            password=args.password,
        )
    except ValidationError as e:
        parser.error(e.errors()[0]["msg"])

    if args.command == "list":
        return login, ListSeeks(), []

    engine = list(args.engine)
    if engine and engine[0] == "--":
        engine = engine[1:]
    if not engine:
        parser.error("an engine command is required")

    mode: RunMode
    try:
        if args.command == "accept":
            mode = AcceptSeek(seek_id=args.seek_id, opponent=args.opponent)
        else:
            mode = PostSeek(
                seek=Seek(
                    size=args.size,
                    time=args.time,
                    increment=args.increment,
                    color=SeekColor(args.color),
                    half_komi=args.half_komi,
                    flatstones=args.flatstones,
                    capstones=args.capstones,
                    unrated=args.unrated,
                    tournament=args.tournament,
                    extra_time_move=args.extra_time_move,
                    extra_time_amount=args.extra_time_amount,
                    opponent=args.opponent,
                )
            )
    except ValidationError as e:
        error = e.errors()[0]
        parser.error(f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}")

    return login, mode, engine
