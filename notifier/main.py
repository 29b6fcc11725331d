from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import load_config
from .consumer import JsonLinesSource, StaticSource, consume
from .dispatcher import NotificationDispatcher
from .store import NotificationWriter, RecipientResolver, build_engine, metadata


def main() -> None:
    args = _parse_args()
    if args.init_config:
        _init_config(Path(args.config))
        return
    config = load_config(args.config)
    _configure_logging(config.settings.log_level, args.verbose)
    logger = logging.getLogger(__name__)

    engine = build_engine(config.database)
    if args.create_schema:
        metadata.create_all(engine)
        logger.info("Schema created")

    if args.message is None and args.input is None:
        if not args.create_schema:
            raise SystemExit("Nothing to do: pass --message, --input or --create-schema")
        return

    dispatcher = NotificationDispatcher(RecipientResolver(engine), NotificationWriter(engine))
    if args.message is not None:
        source = StaticSource([args.message.encode("utf-8")])
    else:
        source = JsonLinesSource(args.input)

    logger.info("Consuming %s messages", config.queue.name)
    try:
        consume(source, dispatcher)
    finally:
        engine.dispose()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Organization notification dispatcher")
    parser.add_argument("--config", default="./config.yaml")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--init-config", action="store_true", help="Create a config.yaml template and exit")
    parser.add_argument("--create-schema", action="store_true", help="Create the notification tables")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--input", help="File with one JSON message per line, or - for stdin")
    group.add_argument("--message", help="A single JSON message body")
    return parser.parse_args()


def _configure_logging(level_name: str, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")


def _init_config(target: Path) -> None:
    if target.exists():
        raise SystemExit(f"Config already exists at {target}")
    root = Path(__file__).resolve().parents[1]
    template = root / "config.example.yaml"
    if not template.exists():
        raise SystemExit("config.example.yaml not found")
    target.write_text(template.read_text(encoding="utf-8"), encoding="utf-8")
    print(f"Wrote config template to {target}")


if __name__ == "__main__":
    main()
