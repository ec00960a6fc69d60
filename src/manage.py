"""Wholesale database management CLI.

Creates or drops the schema of the database configured for the selected
environment (PROTEAN_ENV, DATABASE_URL).

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import os
import sys


def _domain(env=None):
    # The environment must be chosen before the domain loads its config
    if env:
        os.environ["PROTEAN_ENV"] = env

    from wholesale.domain import wholesale

    print("Initializing wholesale domain...")
    wholesale.init()
    return wholesale


def setup_database(env=None):
    """Create the schema for every aggregate and entity."""
    from wholesale.utils.db import setup_db

    domain = _domain(env)
    print("Creating wholesale database schema...")
    setup_db(domain)
    print("Done.")


def drop_database(env=None):
    """Drop the schema of every aggregate and entity."""
    from wholesale.utils.db import drop_db

    domain = _domain(env)
    print("Dropping wholesale database schema...")
    drop_db(domain)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Wholesale database management")
    parser.add_argument(
        "--env",
        choices=["development", "test", "staging", "production"],
        help="Config environment (default: PROTEAN_ENV or development)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database(args.env)
    elif args.command == "drop-db":
        drop_database(args.env)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
