#!/usr/bin/env python3
"""
Useless GPS - Straight-line trips with anime snark

Usage:
    python -m useless_gps START DEST [options]

Options:
    --start-lat/--start-lon  Start coordinate instead of a place name
    --end-lat/--end-lon      Destination coordinate instead of a place name
    --simulate        Play back the trip after analysis
    --speak           Speak commentary with espeak
    --snark           Add random flourishes to commentary
    --seed N          Seed for the random parts (endings, flourishes)
    --html FILE       Write an HTML map of the analysed route
    --log FILE        Log file path (default: useless_gps_TIMESTAMP.log)
    --no-log-file     Only log to stdout
"""

import argparse
import random
import sys
from datetime import datetime

from .app import UselessGPS
from .audio import Audio
from .errors import UselessGPSError
from .logger import Logger
from .models import Coordinate
from .viewer import write_html


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Useless GPS - Straight-line trips with anime snark"
    )
    parser.add_argument("start", nargs="?", help="Start place name")
    parser.add_argument("dest", nargs="?", help="Destination place name")
    parser.add_argument("--start-lat", type=float, metavar="LAT")
    parser.add_argument("--start-lon", type=float, metavar="LON")
    parser.add_argument("--end-lat", type=float, metavar="LAT")
    parser.add_argument("--end-lon", type=float, metavar="LON")
    parser.add_argument("--simulate", action="store_true",
                        help="Play back the trip after analysis")
    parser.add_argument("--speak", action="store_true",
                        help="Speak commentary with espeak")
    parser.add_argument("--snark", action="store_true",
                        help="Add random flourishes to commentary")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--html", metavar="FILE",
                        help="Write an HTML map of the analysed route")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: useless_gps_TIMESTAMP.log)")
    parser.add_argument("--no-log-file", action="store_true",
                        help="Only log to stdout")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    coords = (args.start_lat, args.start_lon, args.end_lat, args.end_lon)
    use_coords = any(c is not None for c in coords)
    if use_coords and any(c is None for c in coords):
        parser.error("--start-lat, --start-lon, --end-lat and --end-lon must be used together")
    if use_coords and (args.start or args.dest):
        parser.error("give either place names or coordinates, not both")
    start = end = None
    if use_coords:
        try:
            start = Coordinate(args.start_lat, args.start_lon)
            end = Coordinate(args.end_lat, args.end_lon)
        except ValueError as e:
            parser.error(str(e))

    log_path = None
    if not args.no_log_file:
        log_path = args.log or f"useless_gps_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    context = {"seed": args.seed} if args.seed is not None else None

    with Logger(log_path, context=context) as logger:
        app = UselessGPS(
            logger=logger,
            audio=Audio(speech=args.speak),
            rng=random.Random(args.seed),
            snark=args.snark,
        )
        try:
            if use_coords:
                app.go_coordinates(start, end)
            else:
                app.go(args.start, args.dest)

            distance_line, bearing_line = app.route_info()
            print(distance_line)
            print(bearing_line)

            if args.html:
                write_html(app.route_snapshot(), args.html)
                print(f"Route map saved to: {args.html}")

            if args.simulate:
                app.simulate()
        except UselessGPSError as e:
            logger.log("Error", {"error": str(e)})
            print(f"Error: {e}")
            return 1
        except KeyboardInterrupt:
            print("\nTrip interrupted")
            app.reset()
    return 0


if __name__ == "__main__":
    sys.exit(main())
