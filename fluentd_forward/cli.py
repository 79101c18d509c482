"""
fluentd-forward CLI - Send log messages to a Fluentd collector.

Usage:
    fluentd-forward "Test Message"
    fluentd-forward --host 10.0.0.5 --tag app.web --event-time "hello" "world"
    fluentd-forward --config config/fluentd.yaml '{"Data":"this is test data"}'
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_HOST, DEFAULT_PORT, FluentdConfig
from .errors import ConfigurationError
from .handler import FluentdHandler

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_config(args: argparse.Namespace) -> FluentdConfig:
    """
    Merge YAML configuration (if any) with command-line overrides.

    Raises:
        ConfigurationError: If the YAML file or an override is invalid
    """
    config = FluentdConfig.from_yaml(args.config) if args.config else FluentdConfig(tag="demo")

    overrides = {}
    if args.host is not None:
        overrides['host'] = args.host
    if args.port is not None:
        overrides['port'] = args.port
    if args.tag is not None:
        overrides['tag'] = args.tag
    if args.event_time:
        overrides['use_event_time'] = True

    return dataclasses.replace(config, **overrides) if overrides else config


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="fluentd-forward - Send log messages to a Fluentd collector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Send two messages with the defaults (127.0.0.1:24224, tag "demo")
  fluentd-forward '{"Data":"this is test data"}' "Test Message"

  # Nanosecond timestamps, custom tag
  fluentd-forward --event-time --tag app.web "hello"

  # Settings from YAML
  fluentd-forward --config config/fluentd.yaml "hello"
"""
    )

    parser.add_argument(
        "--config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--host",
        help=f"Collector host (default: {DEFAULT_HOST})"
    )
    parser.add_argument(
        "--port",
        type=int,
        help=f"Collector port (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--tag",
        help="Message tag (default: demo)"
    )
    parser.add_argument(
        "--event-time",
        action="store_true",
        help="Encode timestamps as EventTime (nanosecond precision)"
    )
    parser.add_argument(
        "--level",
        choices=LEVELS,
        default="INFO",
        help="Level of the sent messages (default: INFO)"
    )
    parser.add_argument(
        "messages",
        nargs="+",
        help="Messages to send"
    )

    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    handler = FluentdHandler(config)
    logger = logging.getLogger("demo")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(handler)

    level = getattr(logging, args.level)
    try:
        for message in args.messages:
            logger.log(level, message)
    finally:
        logger.removeHandler(handler)
        handler.close()

    stats = handler.publisher.get_stats()
    print(f"✓ Sent {stats['message_count']}/{len(args.messages)} messages to {stats['collector']} (tag: {stats['tag']})")
    return 0 if stats['message_count'] == len(args.messages) else 1


if __name__ == "__main__":
    sys.exit(main())
