"""Main CLI entry point for the gdocs-sync command.

This module provides the Typer application that serves as the entry point
for the gdocs-sync command-line tool. It uses options on the main command
rather than subcommands for a simpler user experience.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.errors import InitError
from src.cli.init_command import InitCommand
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand

app = typer.Typer(
    name="gdocs-sync",
    help="""Publish local Markdown files into a single Google Doc.

QUICK START:
  gdocs-sync --init --dir ./docs     # Initialize
  gdocs-sync                         # Sync changed documents
  gdocs-sync --dry-run               # Preview what would be written
  gdocs-sync --force                 # Rebuild even when nothing changed""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)

GETTING_STARTED_MESSAGE = """gdocs-sync                        # Sync changed documents

--init --dir <folder> [--title T]  # Initialize
--dry-run                          # Preview what would be written
--force                            # Rebuild even when nothing changed
--help                             # Show all options

Example:
  gdocs-sync --init --dir ./docs --title "Team Handbook\""""


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"gdocs-sync_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _run_init(
    docs_dir: str,
    title: Optional[str],
    verbosity: int,
    no_color: bool
) -> None:
    """Run initialization command.

    Args:
        docs_dir: Directory holding the markdown files to publish
        title: Title of the Google Doc (defaults to "Documentation")
        verbosity: Verbosity level
        no_color: Whether to disable colored output
    """
    # Configure logging
    _configure_logging(verbosity)

    # Create output handler
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        # Display init message
        output.info("Initializing sync configuration...")
        output.info(f"  Docs directory: {docs_dir}")

        # Write the config file
        init_cmd = InitCommand()
        config = init_cmd.run(docs_dir=docs_dir, document_title=title)

        output.success("Configuration initialized successfully")
        output.info(f"  Config file: {init_cmd.config_path}")
        output.info(f"  Document title: {config.document_title}")
        output.info("")
        output.info("Next steps:")
        output.info("  1. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET (or add them to .env)")
        output.info("  2. Run 'gdocs-sync' to publish your documents")

        raise typer.Exit(ExitCode.SUCCESS)

    except InitError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except typer.Exit:
        raise

    except Exception as e:
        logger.exception("Unexpected error during initialization")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _run_sync(
    file: Optional[str],
    directory: Optional[str],
    dry_run: bool,
    force: bool,
    logdir: Optional[str],
    verbosity: int,
    no_color: bool
) -> None:
    """Run sync command.

    Args:
        file: Optional single file to sync
        directory: Optional subdirectory of the docs directory to sync
        dry_run: Preview changes without applying
        force: Rebuild the document even when nothing changed
        logdir: Directory for log files
        verbosity: Verbosity level
        no_color: Whether to disable colored output
    """
    # Configure logging
    _configure_logging(verbosity, logdir)

    # Create output handler with verbosity settings
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    sync_cmd = SyncCommand(output_handler=output)
    exit_code = sync_cmd.run(
        dry_run=dry_run,
        force=force,
        single_file=file,
        directory=directory,
    )
    raise typer.Exit(exit_code)


@app.command()
def main_command(
    file: Optional[str] = typer.Argument(
        None,
        help="Optional markdown file to sync (syncs only this file)",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Initialize sync configuration (requires --dir)",
    ),
    directory: Optional[str] = typer.Option(
        None,
        "--dir",
        help="Docs directory (with --init) or subdirectory to sync",
        metavar="DIR",
    ),
    title: Optional[str] = typer.Option(
        None,
        "--title",
        help="With --init: title of the Google Doc created on first sync",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Compile documents and preview without touching Google Docs",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Rebuild the document even when no file changed",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Publish local Markdown files into a single Google Doc.

    \b
    QUICK START:
      gdocs-sync --init --dir ./docs     # Initialize
      gdocs-sync                         # Sync changed documents
      gdocs-sync docs/intro.md           # Sync one file
      gdocs-sync --dir docs/guides       # Sync one subdirectory
      gdocs-sync --dry-run               # Preview what would be written
      gdocs-sync --force                 # Rebuild even when nothing changed
    """
    if version:
        typer.echo("gdocs-sync version 0.1.0")
        raise typer.Exit()

    if init:
        if directory is None:
            typer.echo("Error: Missing required option(s): --dir", err=True)
            typer.echo("")
            typer.echo("Example:")
            typer.echo("  gdocs-sync --init --dir ./docs")
            raise typer.Exit(ExitCode.GENERAL_ERROR)

        _run_init(directory, title, verbosity, no_color)
        return

    has_sync_options = dry_run or force or file is not None or directory is not None or logdir is not None
    if not has_sync_options and verbosity == 0 and not no_color:
        if not os.path.exists(InitCommand.DEFAULT_CONFIG_PATH):
            typer.echo(GETTING_STARTED_MESSAGE)
            raise typer.Exit()

    _run_sync(file, directory, dry_run, force, logdir, verbosity, no_color)


def main() -> None:
    """Main entry point for the CLI application."""
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
