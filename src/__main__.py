"""
Console entry point.

Usage:
    python -m src list [--prefix PREFIX]
    python -m src add NAME [NAME ...]
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .aws_clients.dynamodb_store import DynamoDBRecordStore
from .config.config_manager import ConfigManager
from .config.flag_store import JsonFileFlagStore
from .error_handling.exceptions import StoreError
from .presentation.console_view import ConsoleContactsView
from .sync.view_model import ContactsViewModel

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aws-contact-queries", description="Save and query contacts")
    parser.add_argument("--table", help="DynamoDB table name (default: $CONTACTS_TABLE_NAME)")
    parser.add_argument("--region", help="AWS region (default: $AWS_REGION)")
    parser.add_argument("--log-level", default=os.environ.get("LOG_LEVEL", "WARNING"),
                        help="Logging level (default: $LOG_LEVEL or WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List contacts")
    list_parser.add_argument("--prefix", help="Only contacts whose name starts with PREFIX (case-sensitive)")

    add_parser = subparsers.add_parser("add", help="Add contacts, then list all contacts")
    add_parser.add_argument("names", nargs="+", metavar="NAME")

    return parser


def build_view_model(args: argparse.Namespace) -> ContactsViewModel:
    manager = ConfigManager()
    manager.load_from_env()
    config = manager.update_config({"table_name": args.table, "region": args.region})

    logger.debug(f"Using table {config.table_name} in {config.region}, zone {config.zone_name}")
    store = DynamoDBRecordStore(config=config)
    flags = JsonFileFlagStore(config.flag_path)
    return ContactsViewModel(store, flags, zone_id=config.zone_name)


async def run(args: argparse.Namespace) -> int:
    view_model = build_view_model(args)
    view = ConsoleContactsView(view_model)
    view.attach()
    try:
        await view_model.initialize()

        if args.command == "add":
            saved = await view_model.save_contacts(args.names)
            if len(saved) < len(args.names):
                print(f"Saved {len(saved)} of {len(args.names)} contacts", file=sys.stderr)
        else:
            view_model.active_filter_prefix = args.prefix

        await view_model.refresh()
    except StoreError:
        return 1
    finally:
        view.detach()

    return 1 if view_model.state.is_error else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
