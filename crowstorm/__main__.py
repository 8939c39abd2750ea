from __future__ import annotations

import argparse
import sys

import uvicorn

from crowstorm.logging_conf import setup_logging
from crowstorm.settings import Settings, load_settings


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CrowStorm static content server")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--asset-root", default=None)
    parser.add_argument(
        "--no-prefetch",
        action="store_true",
        help="skip downloading the source list before serving",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    return load_settings(
        host=args.host,
        port=args.port,
        asset_root=args.asset_root,
        prefetch_on_startup=False if args.no_prefetch else None,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = build_settings(args)
    setup_logging(settings.log_level)

    from crowstorm.main import create_app

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
