"""
Command-line interface for the Pip-Boy party server.

Provides CLI commands for server management:
- init-db: Initialize the database schema and seed the default catalog
- create-admin: Create (or promote) a game-master account
- run: Start the API server

Usage:
    pipboy-server init-db
    pipboy-server create-admin
    pipboy-server run [--port PORT] [--host HOST]

Environment Variables:
    PIPBOY_ADMIN_USER: Username for the admin (used by init-db and create-admin)
    PIPBOY_ADMIN_PASSWORD: Password for the admin
    PIPBOY_HOST: Host to bind the API server (default: 0.0.0.0)
    PIPBOY_PORT: Port for the API server (default: 3000)
"""

import argparse
import getpass
import os
import sys


def get_admin_credentials_from_env() -> tuple[str, str] | None:
    """
    Get admin credentials from environment variables.

    Returns:
        Tuple of (username, password) if both PIPBOY_ADMIN_USER and
        PIPBOY_ADMIN_PASSWORD are set. None if either is missing.
    """
    username = os.environ.get("PIPBOY_ADMIN_USER")
    password = os.environ.get("PIPBOY_ADMIN_PASSWORD")

    if username and password:
        return username, password
    return None


def prompt_for_credentials() -> tuple[str, str]:
    """
    Interactively prompt for admin credentials.

    Raises:
        SystemExit: If the user cancels (Ctrl+C) during input.
    """
    print("\n" + "=" * 60)
    print("CREATE ADMIN")
    print("=" * 60)

    try:
        while True:
            username = input("Username: ").strip()
            if not 2 <= len(username) <= 20:
                print("Username must be 2-20 characters.")
                continue
            break

        while True:
            password = getpass.getpass("Password: ")
            if not password:
                print("Password required.")
                continue
            if password != getpass.getpass("Confirm password: "):
                print("Passwords do not match. Try again.\n")
                continue
            break
    except KeyboardInterrupt:
        print("\nCancelled.")
        raise SystemExit(1) from None

    return username, password


def cmd_init_db(args: argparse.Namespace) -> int:
    """
    Initialize the database schema.

    Seeds the default catalog and quest unless ``[database] seed_defaults``
    is off. If PIPBOY_ADMIN_USER and PIPBOY_ADMIN_PASSWORD are set and no
    account exists yet, the admin is created as well.

    Returns:
        0 on success, 1 on error
    """
    from pipboy_server.db.schema import init_database
    from pipboy_server.errors import StorageFailure

    try:
        init_database()
    except StorageFailure as e:
        print(f"Error initializing database: {e}", file=sys.stderr)
        return 1
    print("Database initialized successfully.")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    """
    Create a game-master account, or promote an existing one.

    Checks PIPBOY_ADMIN_USER and PIPBOY_ADMIN_PASSWORD first. If not set,
    prompts interactively.

    Returns:
        0 on success, 1 on error
    """
    from pipboy_server.auth.provider import AuthProvider
    from pipboy_server.db.schema import init_database
    from pipboy_server.errors import ServiceError

    init_database(skip_admin=True)

    env_creds = get_admin_credentials_from_env()
    if env_creds:
        username, password = env_creds
        print(f"Using credentials from environment variables for user '{username}'")
    else:
        if not sys.stdin.isatty():
            print(
                "Error: No credentials provided.\n"
                "Set PIPBOY_ADMIN_USER and PIPBOY_ADMIN_PASSWORD environment variables,\n"
                "or run interactively to be prompted for credentials.",
                file=sys.stderr,
            )
            return 1
        username, password = prompt_for_credentials()

    try:
        identity = AuthProvider().ensure_admin(username, password)
    except ServiceError as e:
        print(f"Error creating admin: {e.message}", file=sys.stderr)
        return 1

    print(f"\nAdmin '{identity.username}' is ready.")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the API server in the foreground.

    Host and port resolve in order: CLI argument, PIPBOY_* environment
    variable / config file, built-in default.

    Returns:
        0 on clean shutdown (Ctrl+C)
    """
    from pipboy_server.api.server import start_server

    try:
        start_server(host=getattr(args, "host", None), port=getattr(args, "port", None))
    except KeyboardInterrupt:
        print("\nShutting down.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipboy-server",
        description="Pip-Boy party server management",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser(
        "init-db",
        help="Initialize the database",
        description=(
            "Create the database schema and seed the default catalog. "
            "If PIPBOY_ADMIN_USER and PIPBOY_ADMIN_PASSWORD are set, creates an admin."
        ),
    )
    init_parser.set_defaults(func=cmd_init_db)

    admin_parser = subparsers.add_parser(
        "create-admin",
        help="Create an admin account",
        description=(
            "Create or promote a game-master account. Uses PIPBOY_ADMIN_USER and "
            "PIPBOY_ADMIN_PASSWORD if set, otherwise prompts interactively."
        ),
    )
    admin_parser.set_defaults(func=cmd_create_admin)

    run_parser = subparsers.add_parser("run", help="Run the API server")
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="API server port (default: 3000, or PIPBOY_PORT env var)",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: 0.0.0.0, or PIPBOY_HOST env var)",
    )
    run_parser.set_defaults(func=cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
