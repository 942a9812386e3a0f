"""
gpx-datum-tools command line.

    python src/main.py tokyo2jgd [-w] [-v] input.gpx > output.gpx
    python src/main.py gpse2gpx input.GPSe > output.gpx
    python src/main.py serve [--port 8000]

tokyo2jgd: every track point of the input GPX is taken as Tokyo datum and
converted to JGD2000. Default is the local pyproj transform; -w uses
Web版 TKY2JGD (an external service), -v logs each request/response to stderr.
Waypoints and routes are left as they are.
"""

import argparse
import asyncio
import logging
import os
import sys

from dotenv import find_dotenv, load_dotenv

from shared.config import settings
from shared.constants import DEV_PORT
from shared.errors import GeoConvError

logger = logging.getLogger("main")


def _setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.WARNING)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    logging.captureWarnings(True)


def cmd_tokyo2jgd(args: argparse.Namespace) -> int:
    from engine.pipeline import build_converter, convert_gpx

    converter = build_converter("tky2jgd" if args.web else args.converter)
    with open(args.input, "rb") as f:
        data = f.read()
    sys.stdout.write(asyncio.run(convert_gpx(data, converter)))
    return 0


def cmd_gpse2gpx(args: argparse.Namespace) -> int:
    from formats.gpse import gpse_to_gpx

    with open(args.input, "rb") as f:
        data = f.read()
    sys.stdout.write(gpse_to_gpx(data))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from api.server import app

    print(f"Starting gpx-datum-tools API on port {args.port}...", file=sys.stderr)
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gpx-datum-tools", description="GPSe/GPX conversion and Tokyo -> JGD2000 re-projection")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("tokyo2jgd", help="convert GPX track points from Tokyo datum to JGD2000")
    p.add_argument("-w", dest="web", action="store_true", help="use Web TKY2JGD (external service)")
    p.add_argument("-v", dest="verbose", action="store_true", help="log request/response progress to stderr")
    p.add_argument("-m", dest="converter", choices=("local", "tky2jgd"), default=None,
                   help=f"converter (default: {settings.DEFAULT_CONVERTER})")
    p.add_argument("input", help="input GPX file")
    p.set_defaults(func=cmd_tokyo2jgd)

    p = sub.add_parser("gpse2gpx", help="convert a GPSe track log to GPX")
    p.add_argument("-v", dest="verbose", action="store_true")
    p.add_argument("input", help="input GPSe file")
    p.set_defaults(func=cmd_gpse2gpx)

    p = sub.add_parser("serve", help="run the HTTP API")
    p.add_argument("-v", dest="verbose", action="store_true")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=int(os.environ.get("PORT", DEV_PORT)))
    p.set_defaults(func=cmd_serve)
    return parser


def run(argv=None) -> int:
    # .env in the working directory (e.g. PORT for serve); real env vars win
    load_dotenv(find_dotenv(usecwd=True))
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return args.func(args)
    except (GeoConvError, OSError) as e:
        logger.debug("conversion failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(run())
