from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from .models import Channel, Configuration
from .playlist.m3u_parser import M3UParser
from .settings import Settings, load_settings
from .utils.config_codec import ConfigCodec, MalformedToken
from .utils.http_client import FetchError, HttpClient


def parse_args(settings: Settings, argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve an M3U channel list as a Stremio-style catalog.")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (DEBUG, INFO, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the add-on HTTP server")
    serve.add_argument("--host", default=settings.host, help="Interface to bind")
    serve.add_argument("--port", type=int, default=settings.port, help="Port to listen on")

    token = subparsers.add_parser("token", help="Print the configuration token for a source/target pair")
    token.add_argument("--m3u", default=settings.m3u_url, help="Playlist source address")
    token.add_argument("--ip", default=settings.target_ip, help="Address that replaces 127.0.0.1 in stream URLs")

    decode = subparsers.add_parser("decode", help="Show the configuration carried by a token")
    decode.add_argument("token", help="Token taken from an add-on URL")

    channels = subparsers.add_parser("channels", help="Download and list the channels of a playlist")
    channels.add_argument("--m3u", default=settings.m3u_url, help="Playlist source address")
    channels.add_argument("--ip", default=settings.target_ip, help="Address that replaces 127.0.0.1 in stream URLs")
    channels.add_argument("--group", default=None, help="Only list channels in this group")
    return parser.parse_args(argv)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def print_channels(channels: List[Channel]) -> None:
    if not channels:
        logging.info("No channels found in this playlist.")
        return
    logging.info("%-24s | %-40s | %s", "Group", "Name", "URL")
    logging.info("%s", "-" * 100)
    for channel in channels:
        logging.info("%-24s | %-40s | %s", channel.group, channel.name, channel.url)


def list_channels(args: argparse.Namespace, settings: Settings) -> int:
    config = Configuration(source=args.m3u, substitution_target=args.ip)
    with HttpClient(timeout=settings.http_timeout) as http_client:
        try:
            text = http_client.fetch_text(config.source)
        except FetchError as exc:
            logging.error("%s", exc)
            return 1
    channels = M3UParser(default_logo=settings.default_logo).parse(text, config.substitution_target)
    if args.group:
        channels = tuple(channel for channel in channels if channel.group == args.group)
    print_channels(list(channels))
    logging.info("%s channels listed.", len(channels))
    return 0


def serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from .addon import create_app

    logging.info("Serving add-on on %s:%s", args.host, args.port)
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def run(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    args = parse_args(settings, argv)
    configure_logging(args.log_level)
    codec = ConfigCodec(default_source=settings.m3u_url)

    if args.command == "token":
        print(codec.encode(Configuration(source=args.m3u, substitution_target=args.ip)))
        return 0

    if args.command == "decode":
        try:
            config = codec.decode(args.token)
        except MalformedToken as exc:
            logging.error("%s", exc)
            return 1
        print(json.dumps(config.model_dump(), ensure_ascii=False, indent=2))
        return 0

    if args.command == "channels":
        return list_channels(args, settings)

    return serve(args, settings)


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
