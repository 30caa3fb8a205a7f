"""Drives each document through the content, table, formatting and link phases.

Every phase submits one batch, then the document is re-fetched so the next
resolver sees the offsets the service actually assigned. A remote failure
fails the current document only; the run moves on to the next one.

Documents of a run are appended one after another to a single Google Doc that
is cleared when the run starts.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from src.gdocs_client.api_wrapper import APIWrapper
from src.gdocs_client.errors import (
    DocumentNotFoundError,
    GoogleDocsError,
    InvalidCredentialsError,
    PermissionDeniedError,
)
from src.markdown_compiler import request_builders as rb
from src.markdown_compiler.mutation_compiler import MutationCompiler
from src.reconciliation.placeholder_resolver import PlaceholderLinkResolver
from src.reconciliation.position_resolver import PositionResolver
from src.reconciliation.snapshot import DocumentSnapshot
from src.reconciliation.table_cell_locator import TableCellLocator

from .collaborators import StateStore
from .models import (
    DocumentOutcome,
    DocumentStatus,
    PhaseState,
    SourceDocument,
    SyncRun,
)
from .placeholder_builder import PlaceholderBuilder, PlaceholderResult

logger = logging.getLogger(__name__)


@dataclass
class DocumentPreview:
    """What a document would produce, computed without touching the remote."""

    path: str
    title: str
    requests: int
    directives: int
    tables: int
    links: int
    images: int
    blocks_dropped: int


class PhaseCoordinator:
    """Sequences the sync phases for every document of a run.

    Example:
        >>> coordinator = PhaseCoordinator(APIWrapper(Authenticator()))
        >>> doc_id = coordinator.initialize_run(None, "Documentation")
        >>> run = coordinator.sync_documents(documents, doc_id)
        >>> run.failed
        0
    """

    def __init__(
        self,
        api: APIWrapper,
        compiler: Optional[MutationCompiler] = None,
        position_resolver: Optional[PositionResolver] = None,
        table_locator: Optional[TableCellLocator] = None,
        placeholder_resolver: Optional[PlaceholderLinkResolver] = None,
        placeholder_builder: Optional[PlaceholderBuilder] = None,
        state_store: Optional[StateStore] = None,
    ):
        self.api = api
        self.compiler = compiler or MutationCompiler()
        self.position_resolver = position_resolver or PositionResolver()
        self.table_locator = table_locator or TableCellLocator()
        self.placeholder_resolver = placeholder_resolver or PlaceholderLinkResolver()
        self.placeholder_builder = placeholder_builder or PlaceholderBuilder()
        self.state_store = state_store

    # Run level

    def initialize_run(self, document_id: Optional[str], title: str) -> str:
        """Make sure the target document exists and clear its body.

        A rejected token triggers exactly one re-authentication, after which
        only this initialization step is retried.

        Args:
            document_id: Known target document, or None to create one
            title: Title used when a document has to be created

        Returns:
            The document id content will be appended to

        Raises:
            GoogleDocsError: If initialization still fails
        """
        try:
            return self._initialize(document_id, title)
        except PermissionDeniedError as e:
            logger.warning(f"{e}; re-authenticating and retrying initialization once")
            self._reauthenticate()
            return self._initialize(document_id, title)

    def _reauthenticate(self) -> None:
        authenticator = self.api.authenticator
        authenticator.clear_tokens()
        authenticator.authenticate()
        self.api.reset()

    def _initialize(self, document_id: Optional[str], title: str) -> str:
        document = None
        if document_id:
            try:
                document = self.api.get_document(document_id)
            except DocumentNotFoundError:
                logger.warning(f"Document {document_id} no longer exists, creating a new one")

        if document is None:
            document = self.api.create_document(title)
            document_id = document["documentId"]

        snapshot = DocumentSnapshot.from_document(document)
        if snapshot.end_index > 2:
            logger.info(f"Clearing {snapshot.end_index - 2} character(s) from {document_id}")
            self.api.batch_update(
                document_id, [rb.delete_content_range(1, snapshot.end_index - 1)]
            )
        return document_id

    def sync_documents(
        self,
        documents: Iterable[SourceDocument],
        document_id: str,
        run: Optional[SyncRun] = None,
        on_progress: Optional[Callable[[DocumentOutcome], None]] = None,
    ) -> SyncRun:
        """Append every document in order, isolating failures per document.

        Args:
            documents: Documents in output order
            document_id: Target document (already initialized)
            run: Run to record into (a new one by default)
            on_progress: Called with each outcome as it completes

        Returns:
            The SyncRun with one outcome per document
        """
        run = run or SyncRun(document_id=document_id)
        run.document_id = document_id

        for document in documents:
            previous_hash = None
            if self.state_store is not None:
                previous_hash = self.state_store.get_synced_hash(document.path)

            outcome = self.sync_document(document, document_id)
            if outcome.succeeded:
                outcome.status = DocumentStatus.CREATED if previous_hash is None else DocumentStatus.UPDATED
                if self.state_store is not None:
                    self.state_store.record_synced(document.path, document.content_hash, document_id)
            else:
                outcome.status = DocumentStatus.FAILED

            run.record(outcome)
            if on_progress is not None:
                on_progress(outcome)

        logger.info(
            f"Run finished: {run.created} created, {run.updated} updated, "
            f"{run.skipped} skipped, {run.failed} failed"
        )
        return run

    # Document level

    def sync_document(self, document: SourceDocument, document_id: str) -> DocumentOutcome:
        """Run one document through all phases.

        Raises:
            InvalidCredentialsError: Credentials problems abort the whole run
        """
        outcome = DocumentOutcome(path=document.path, title=document.title)
        stats = outcome.stats

        try:
            placeholders = self.placeholder_builder.build(document.markdown, document.base_dir)
        except InvalidCredentialsError:
            raise
        except Exception as e:
            # Renderer and uploader failures fail this document only.
            return self._fail(document, outcome, e)

        try:
            compiled = self.compiler.compile_markdown(placeholders.markdown)
            stats.blocks_dropped = len(compiled.skipped_blocks)

            before = self._snapshot(document_id)
            scope_start = max(1, before.end_index - 1)
            existing_tables = len(before.tables())

            logger.info(f"Phase 1: applying content for {document.path}")
            self._submit(document_id, compiled.requests, stats)
            outcome.state = PhaseState.CONTENT_APPLIED
            snapshot = self._snapshot(document_id)

            logger.info(f"Phase 2: populating {len(compiled.table_specs)} table(s)")
            inserts = self.table_locator.locate(compiled.table_specs, snapshot, existing_tables)
            self._submit(document_id, self.table_locator.build_requests(inserts), stats)
            stats.cells_populated = len(inserts)
            outcome.state = PhaseState.TABLES_POPULATED
            snapshot = self._snapshot(document_id)

            logger.info(f"Phase 3: formatting {len(compiled.format_directives)} element(s)")
            resolved = self.position_resolver.resolve(
                compiled.format_directives,
                snapshot,
                scope_start=scope_start,
                simulated_offsets=compiled.simulated_offsets,
            )
            self._submit(document_id, self.position_resolver.build_requests(resolved), stats)
            stats.directives_resolved = len(resolved)
            stats.directives_skipped = len(compiled.format_directives) - len(resolved)
            outcome.state = PhaseState.FORMATTED
            snapshot = self._snapshot(document_id)

            logger.info(
                f"Phase 4: resolving {len(placeholders.links)} link(s) "
                f"and {len(placeholders.images)} image(s)"
            )
            self._resolve_placeholders(document_id, placeholders, snapshot, outcome)
            outcome.state = PhaseState.LINKS_RESOLVED

            outcome.state = PhaseState.DONE
        except InvalidCredentialsError:
            raise
        except GoogleDocsError as e:
            return self._fail(document, outcome, e)

        return outcome

    def _fail(self, document: SourceDocument, outcome: DocumentOutcome,
              error: Exception) -> DocumentOutcome:
        outcome.failed_phase = outcome.state
        outcome.state = PhaseState.FAILED
        outcome.error = str(error)
        logger.error(
            f"Document {document.path} failed after {outcome.failed_phase.value}: {error}"
        )
        return outcome

    def preview(self, document: SourceDocument) -> DocumentPreview:
        """Compile a document without contacting the remote (dry run)."""
        placeholders = PlaceholderBuilder(
            diagram_languages=self.placeholder_builder.diagram_languages
        ).build(document.markdown, document.base_dir)
        compiled = self.compiler.compile_markdown(placeholders.markdown)
        return DocumentPreview(
            path=document.path,
            title=document.title,
            requests=len(compiled.requests),
            directives=len(compiled.format_directives),
            tables=len(compiled.table_specs),
            links=len(placeholders.links),
            images=len(placeholders.images),
            blocks_dropped=len(compiled.skipped_blocks),
        )

    def _resolve_placeholders(self, document_id: str, placeholders: PlaceholderResult,
                              snapshot: DocumentSnapshot, outcome: DocumentOutcome) -> None:
        stats = outcome.stats
        replacements = self.placeholder_resolver.plan(
            placeholders.links, placeholders.images, snapshot
        )
        stats.placeholders_unresolved = (
            len(placeholders.links) + len(placeholders.images) - len(replacements)
        )

        for chunk in self.placeholder_resolver.chunk(replacements):
            images = sum(1 for r in chunk if r.is_image)
            try:
                self._submit(document_id, self.placeholder_resolver.chunk_requests(chunk), stats)
                stats.images_inserted += images
            except (InvalidCredentialsError, PermissionDeniedError):
                raise
            except GoogleDocsError as e:
                if not images:
                    raise
                logger.warning(
                    f"Chunk of {len(chunk)} replacement(s) rejected ({e}); "
                    f"retrying with images as plain text"
                )
                self._submit(
                    document_id,
                    self.placeholder_resolver.chunk_requests(chunk, fallback=True),
                    stats,
                )
                stats.images_fallback += images
            stats.links_resolved += len(chunk) - images

    def _snapshot(self, document_id: str) -> DocumentSnapshot:
        return DocumentSnapshot.from_document(self.api.get_document(document_id))

    def _submit(self, document_id: str, requests: List[dict], stats) -> None:
        if not requests:
            return
        self.api.batch_update(document_id, requests)
        stats.requests += len(requests)
