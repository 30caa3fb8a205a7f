"""Sync command orchestration for CLI.

This module provides the SyncCommand class that wires configuration, state,
file discovery and the PhaseCoordinator together and turns failures into exit
codes.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Set

from src.cli.config import StateManager
from src.cli.errors import CLIError, ConfigNotFoundError
from src.cli.models import ExitCode, SyncState
from src.cli.output import OutputHandler
from src.file_mapper.config_loader import ConfigLoader
from src.file_mapper.errors import ConfigError, FileMapperError, FilesystemError
from src.file_mapper.file_mapper import FileMapper
from src.file_mapper.models import SyncConfig
from src.gdocs_client.api_wrapper import APIWrapper
from src.gdocs_client.auth import Authenticator
from src.gdocs_client.errors import (
    GoogleDocsError,
    InvalidCredentialsError,
    PermissionDeniedError,
)
from src.markdown_compiler.block_classifier import BlockClassifier
from src.markdown_compiler.mutation_compiler import MutationCompiler
from src.reconciliation.placeholder_resolver import PlaceholderLinkResolver
from src.sync_engine.collaborators import AttachmentUploader, DiagramRenderer
from src.sync_engine.models import (
    DocumentOutcome,
    DocumentStatus,
    SourceDocument,
    SyncRun,
)
from src.sync_engine.phase_coordinator import PhaseCoordinator
from src.sync_engine.placeholder_builder import PlaceholderBuilder

logger = logging.getLogger(__name__)


class SyncCommand:
    """Orchestrates one sync run for the CLI.

    The sync workflow:
        1. Load configuration and sync state
        2. Select documents (all, one directory, or one file)
        3. Skip the run when no document changed since the last sync
        4. Initialize the target Google Doc (create or clear)
        5. Append every document through the PhaseCoordinator
        6. Save state and print the summary

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(output_handler=output)
        >>> exit_code = sync_cmd.run(dry_run=False, force=False)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: str = ".gdocs-sync/config.yaml",
        state_path: str = ".gdocs-sync/state.yaml",
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api: Optional[APIWrapper] = None,
        coordinator: Optional[PhaseCoordinator] = None,
        file_mapper: Optional[FileMapper] = None,
        renderer: Optional[DiagramRenderer] = None,
        uploader: Optional[AttachmentUploader] = None,
    ):
        """Initialize sync command with dependencies.

        All collaborators are optional; missing ones are created from the
        loaded configuration when the run starts.
        """
        self.config_path = config_path
        self.state_path = state_path
        self.output_handler = output_handler or OutputHandler()
        self.authenticator = authenticator
        self.api = api
        self.coordinator = coordinator
        self.file_mapper = file_mapper
        self.renderer = renderer
        self.uploader = uploader

    def run(
        self,
        dry_run: bool = False,
        force: bool = False,
        single_file: Optional[str] = None,
        directory: Optional[str] = None,
    ) -> ExitCode:
        """Execute a sync run.

        Args:
            dry_run: Compile and report without contacting Google Docs
            force: Rebuild even when no document changed
            single_file: Sync only this markdown file
            directory: Sync only markdown files under this directory

        Returns:
            ExitCode indicating success or specific failure type
        """
        output = self.output_handler
        try:
            if single_file and directory:
                output.error("Cannot use a FILE argument together with --dir")
                return ExitCode.GENERAL_ERROR

            if not Path(self.config_path).exists():
                self._print_getting_started()
                return ExitCode.GENERAL_ERROR

            logger.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load(self.config_path)

            logger.info(f"Loading sync state from {self.state_path}")
            state = StateManager.load(self.state_path)
            logger.info(f"Last synced: {state.last_synced or 'never'}")

            mapper = self.file_mapper or FileMapper(config)
            documents = self._select_documents(mapper, config, single_file, directory)
            if not documents:
                output.warning(f"No markdown files found in {directory or config.docs_dir}")
                return ExitCode.SUCCESS

            changed = [
                d for d in documents if state.get_synced_hash(d.path) != d.content_hash
            ]
            logger.info(f"{len(changed)} of {len(documents)} document(s) changed")
            if not changed and not force:
                output.print_summary(_skipped_run(documents, state), state.root_document_url or "")
                return ExitCode.SUCCESS

            if dry_run:
                return self._run_dry_run(config, state, documents)

            return self._run_sync(config, state, documents)

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            output.error(f"Authentication failed: {e}")
            output.info("Check GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET environment variables")
            return ExitCode.AUTH_ERROR

        except PermissionDeniedError as e:
            logger.error(f"Access denied: {e}")
            output.error(f"Access denied: {e}")
            return ExitCode.AUTH_ERROR

        except GoogleDocsError as e:
            logger.error(f"API error: {e}")
            output.error(f"API error: {e}")
            output.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except (ConfigError, ConfigNotFoundError) as e:
            logger.error(f"Configuration error: {e}")
            output.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except (FileMapperError, CLIError) as e:
            logger.error(f"Sync error: {e}")
            output.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during sync")
            output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _select_documents(
        self,
        mapper: FileMapper,
        config: SyncConfig,
        single_file: Optional[str],
        directory: Optional[str],
    ) -> List[SourceDocument]:
        """Resolve the documents of this run, keyed relative to docs_dir.

        Raises:
            FilesystemError: If the file or directory is outside docs_dir
        """
        if single_file:
            logger.info(f"Single-file sync mode: {single_file}")
            return [mapper.to_source_document(mapper.read_file(single_file, config.docs_dir))]

        documents = mapper.scan_documents(config.docs_dir)
        if not directory:
            return documents

        prefix = Path(os.path.relpath(directory, config.docs_dir)).as_posix()
        if prefix.startswith('..'):
            raise FilesystemError(
                directory,
                'validate',
                f'Directory is outside docs directory {config.docs_dir}'
            )
        if prefix == '.':
            return documents
        return [d for d in documents if d.path.startswith(prefix + '/')]

    def _build_coordinator(self, api: Optional[APIWrapper], config: SyncConfig,
                           state: SyncState) -> PhaseCoordinator:
        if self.coordinator is not None:
            return self.coordinator
        return PhaseCoordinator(
            api,
            compiler=MutationCompiler(BlockClassifier(config.diagram_languages)),
            placeholder_resolver=PlaceholderLinkResolver(config.image_chunk_size),
            placeholder_builder=PlaceholderBuilder(
                renderer=self.renderer,
                uploader=self.uploader,
                diagram_languages=config.diagram_languages,
            ),
            state_store=state,
        )

    def _run_dry_run(self, config: SyncConfig, state: SyncState,
                     documents: List[SourceDocument]) -> ExitCode:
        logger.info(f"Dry run: previewing {len(documents)} document(s)")
        coordinator = self._build_coordinator(self.api, config, state)
        previews = [coordinator.preview(document) for document in documents]
        self.output_handler.print_dryrun_summary(previews)
        return ExitCode.SUCCESS

    def _run_sync(self, config: SyncConfig, state: SyncState,
                  documents: List[SourceDocument]) -> ExitCode:
        output = self.output_handler
        if self.api is None:
            self.api = APIWrapper(self.authenticator or Authenticator())
        coordinator = self._build_coordinator(self.api, config, state)

        with output.spinner("Preparing Google Doc..."):
            document_id = coordinator.initialize_run(
                state.root_document_id, config.document_title
            )
        state.root_document_id = document_id
        state.root_document_url = APIWrapper.document_url(document_id)

        written: Set[str] = set()
        try:
            with output.progress_bar(len(documents), "Syncing documents") as progress:
                task = progress.add_task("Syncing documents", total=len(documents))

                def on_progress(outcome: DocumentOutcome) -> None:
                    progress.update(task, advance=1)
                    if outcome.succeeded:
                        written.add(outcome.path)

                run = coordinator.sync_documents(documents, document_id, on_progress=on_progress)

            for outcome in run.outcomes:
                output.document_result(outcome)
                record = state.documents.get(outcome.path)
                if outcome.succeeded and record is not None:
                    record.title = outcome.title

            state.mark_run_completed()
        finally:
            # The document was cleared; only what this run wrote is in it now.
            dropped = state.retain_documents(written)
            if dropped:
                logger.info(
                    f"Dropped sync state of {len(dropped)} document(s) not written "
                    f"by this run: {', '.join(dropped)}"
                )
            StateManager.save(self.state_path, state)

        output.print_summary(run, state.root_document_url)
        if run.failed:
            return ExitCode.SYNC_FAILURES
        return ExitCode.SUCCESS

    def _print_getting_started(self) -> None:
        output = self.output_handler
        output.print("No sync configuration found.\n")
        output.print("To get started, initialize with your docs directory:\n")
        output.print("  gdocs-sync --init --dir ./docs\n")
        output.print("Required environment variables:")
        output.print("  GOOGLE_CLIENT_ID        - OAuth client ID (desktop app)")
        output.print("  GOOGLE_CLIENT_SECRET    - OAuth client secret\n")
        output.print("Run 'gdocs-sync --help' for more options.")


def _skipped_run(documents: List[SourceDocument], state: SyncState) -> SyncRun:
    run = SyncRun(document_id=state.root_document_id)
    for document in documents:
        run.record(DocumentOutcome(
            path=document.path,
            title=document.title,
            status=DocumentStatus.SKIPPED,
        ))
    return run
