"""
mongofs: browse and manage files stored in MongoDB GridFS
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from mongofs.config import ENV_PREFIX, get_settings
from mongofs.connections import filesystem, mongofs_connections
from mongofs.filesystem.base import WriteConfig
from mongofs.models import RenameOutcome


def fail(message: str):
    logging.error(message)
    sys.exit(1)


def list_files(args):
    with mongofs_connections():
        listing = filesystem().list_contents(args.dirname)
    if listing is False:
        fail(f"Could not list {args.dirname!r}")
    for entry in listing:
        if entry["type"] == "dir":
            print(f"{'<dir>':>10}  {'':19}  {entry['path']}/")
        else:
            print(f"{entry['size'] or 0:>10}  {entry['timestamp'] or '':>19}  {entry['path']}")


def cat_file(args):
    with mongofs_connections():
        result = filesystem().read(args.path)
    if result is False:
        fail(f"File not found: {args.path}")
    sys.stdout.buffer.write(result["contents"])


def put_file(args):
    local = Path(args.local_path)
    if not local.is_file():
        fail(f"No such local file: {local}")
    config = WriteConfig(mimetype=args.mimetype) if args.mimetype else WriteConfig()
    with mongofs_connections(), local.open("rb") as f:
        result = filesystem().write_stream(args.path, f, config)
    if result is False:
        fail(f"Could not store {local} as {args.path}")
    print(json.dumps(result, indent=2))


def get_file(args):
    with mongofs_connections():
        result = filesystem().read(args.path)
    if result is False:
        fail(f"File not found: {args.path}")
    Path(args.local_path).write_bytes(result["contents"])
    logging.info(f"Written {len(result['contents'])} bytes to {args.local_path}")


def stat_file(args):
    with mongofs_connections():
        result = filesystem().get_metadata(args.path)
    if result is False:
        fail(f"File not found: {args.path}")
    print(json.dumps(result, indent=2))


def delete_file(args):
    with mongofs_connections():
        outcome = filesystem().delete_steps(args.path)
    if not outcome:
        fail(f"Could not delete {args.path}: {outcome.value}")


def delete_dir(args):
    with mongofs_connections():
        if not filesystem().delete_dir(args.path):
            fail(f"Could not (completely) delete {args.path}")


def copy_file(args):
    with mongofs_connections():
        if not filesystem().copy(args.path, args.newpath):
            fail(f"Could not copy {args.path} to {args.newpath}")


def move_file(args):
    with mongofs_connections():
        outcome = filesystem().rename_steps(args.path, args.newpath)
    if outcome is RenameOutcome.DELETE_FAILED:
        fail(f"Copied {args.path} to {args.newpath}, but could not delete {args.path}")
    if not outcome:
        fail(f"Could not move {args.path} to {args.newpath}")


def ensure_index(_args):
    with mongofs_connections():
        if filesystem().ensure_index():
            logging.info("Created filename index")
        else:
            logging.info("Filename index already exists (or cannot be created)")


def show_config(_args):
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m mongofs")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("ls", help="List files (non-recursive listing of all paths under a directory)")
    p.add_argument("dirname", nargs="?", default="", help="Directory to list (default: root)")
    p.set_defaults(func=list_files)

    p = subparsers.add_parser("cat", help="Write the contents of a file to stdout")
    p.add_argument("path")
    p.set_defaults(func=cat_file)

    p = subparsers.add_parser("put", help="Upload a local file")
    p.add_argument("local_path", help="The file to upload")
    p.add_argument("path", help="The path to store it at")
    p.add_argument("-m", "--mimetype", help="Mimetype to store with the file")
    p.set_defaults(func=put_file)

    p = subparsers.add_parser("get", help="Download a file")
    p.add_argument("path")
    p.add_argument("local_path", help="Where to write the file")
    p.set_defaults(func=get_file)

    p = subparsers.add_parser("stat", help="Show the metadata of a file")
    p.add_argument("path")
    p.set_defaults(func=stat_file)

    p = subparsers.add_parser("rm", help="Delete a file")
    p.add_argument("path")
    p.set_defaults(func=delete_file)

    p = subparsers.add_parser("rmdir", help="Delete all files under a directory")
    p.add_argument("path")
    p.set_defaults(func=delete_dir)

    p = subparsers.add_parser("cp", help="Copy a file")
    p.add_argument("path")
    p.add_argument("newpath")
    p.set_defaults(func=copy_file)

    p = subparsers.add_parser("mv", help="Move (copy and delete) a file")
    p.add_argument("path")
    p.add_argument("newpath")
    p.set_defaults(func=move_file)

    p = subparsers.add_parser("ensure-index", help="Create the filename index if it does not exist")
    p.set_defaults(func=ensure_index)

    p = subparsers.add_parser("config", help="Show the current settings")
    p.set_defaults(func=show_config)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    args.func(args)


if __name__ == "__main__":
    main()
