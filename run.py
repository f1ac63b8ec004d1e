import argparse
import asyncio
import json
import logging

from linkshelf import create_app, get_storage

log = logging.getLogger("werkzeug")
log.disabled = True


def main() -> None:
    p = argparse.ArgumentParser(prog="linkshelf")
    sub = p.add_subparsers(dest="command", required=True)
    resolve = sub.add_parser("resolve", help="fetch and print metadata for a URL")
    resolve.add_argument("url")
    sub.add_parser("init-db", help="create the database tables")
    args = p.parse_args()

    app = create_app()
    if args.command == "init-db":
        print("Initialized Linkshelf database.", flush=True)
        return

    storage = get_storage(app)
    metadata = asyncio.run(storage.resolver.resolve(args.url))
    print(json.dumps(metadata.as_dict(), indent=2), flush=True)


if __name__ == "__main__":
    main()
