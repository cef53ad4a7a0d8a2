"""Entry point for the liveness agent — `liveness-agent` console script."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from rich.console import Console
from rich.panel import Panel

from liveness_agent.api.server import create_app
from liveness_agent.config import DEFAULT_CONFIG_PATH, AgentSettings, load_settings
from liveness_agent.storage.migrator import MigrationError, run_migrations

console = Console()

DEFAULT_MIGRATION_DIR = "migrations"


def configure_logging(settings: AgentSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.effective_log_level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def run_server(settings: AgentSettings) -> None:
    """Start the agent HTTP server."""
    managers = "\n".join(f"  - {u}" for u in settings.manager_urls) or "  (none)"
    console.print(
        Panel.fit(
            f"[bold]{settings.service_name}[/bold] ({settings.service_env})\n"
            f"Bind:     {settings.app_host}:{settings.app_port}\n"
            f"TLS:      {'on' if settings.tls_enabled else 'off'}\n"
            f"Database: {settings.database_path}\n"
            f"Timeout:  {settings.manager_timeout}s\n"
            f"Managers:\n{managers}",
            title="liveness-agent",
            border_style="green",
        )
    )

    ssl_options: dict[str, str] = {}
    if settings.tls_enabled:
        ssl_options["ssl_certfile"] = settings.tls_cert_file
        ssl_options["ssl_keyfile"] = settings.tls_key_file
        if settings.tls_ca_file:
            ssl_options["ssl_ca_certs"] = settings.tls_ca_file

    uvicorn.run(
        create_app(settings),
        host=settings.app_host,
        port=settings.app_port,
        log_level=settings.effective_log_level.lower(),
        **ssl_options,
    )


def run_migrate(settings: AgentSettings, migration_dir: str) -> int:
    """Apply SQL migrations; returns a process exit code."""
    logger = logging.getLogger("liveness_agent.migrate")
    logger.info("Starting migrator for %s", settings.service_name)
    try:
        applied = run_migrations(settings.database_path, migration_dir)
    except MigrationError as e:
        console.print(Panel(str(e), title="Migration failed", style="bold red"))
        return 1
    console.print(f"[green]Applied {len(applied)} migration(s) to {settings.database_path}[/green]")
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Liveness Agent")
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG_PATH, help="Path to the TOML config file",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="Start the agent HTTP server")

    migrate_parser = sub.add_parser("migrate", help="Apply SQL migrations")
    migrate_parser.add_argument(
        "migration_dir", nargs="?", default=DEFAULT_MIGRATION_DIR,
        help="Directory holding *.sql files",
    )

    args = parser.parse_args(argv)

    if args.command not in ("serve", "migrate"):
        parser.print_help()
        sys.exit(1)

    settings = load_settings(args.config)
    configure_logging(settings)

    if args.command == "serve":
        run_server(settings)
    else:
        sys.exit(run_migrate(settings, args.migration_dir))


if __name__ == "__main__":
    main()
