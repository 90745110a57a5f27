# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""sipprobe CLI."""

from __future__ import annotations

import argparse
import logging
import sys

from ..config import EXIT_FATAL, EXIT_NOT_OK, ProbeSettings, load_probe_settings
from ..errors import ConfigurationError
from ..log import flush_logging, setup_logging
from ..runtime import SipProbe

logger = logging.getLogger("sipprobe")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send one SIP OPTIONS request and exit 0 only on a 200 OK reply"
    )
    parser.add_argument(
        "--addr",
        default="",
        help="Target address, e.g. udp://host:5060, tls://host:5061 or wss://host/ws",
    )
    parser.add_argument(
        "--skip-verify",
        "--skipverify",
        dest="skip_verify",
        action="store_true",
        help="Skip TLS certificate verification (tls and wss targets)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Do debug logging",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Overall probe budget in seconds (default: 15, or SIPPROBE_TIMEOUT)",
    )
    return parser


def build_settings(args: argparse.Namespace) -> ProbeSettings:
    settings = load_probe_settings()
    if args.skip_verify:
        settings.verify_tls = False
    if args.timeout is not None and args.timeout > 0:
        settings.timeout = args.timeout
    return settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.debug else None)
    if args.debug:
        logger.debug("Debug logging enabled")

    if not args.addr:
        logger.warning("No addr parameter found!")
        parser.print_usage(sys.stderr)
        flush_logging()
        return EXIT_NOT_OK

    settings = build_settings(args)
    prober = SipProbe(settings)
    try:
        target = prober.target(args.addr)
    except ConfigurationError as exc:
        logger.critical("addr: %s", exc)
        flush_logging()
        return EXIT_FATAL
    logger.debug('Got addr: "%s"', target.url)

    result = prober.probe(target.url)
    flush_logging()
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
