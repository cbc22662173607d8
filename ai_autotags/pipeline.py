"""End-to-end processing of one document."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from .errors import FrontmatterError, InputError
from .frontmatter import FrontmatterService, split_document
from .service import AIService
from .vault import Vault, document_key

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def _log_notice(message: str) -> None:
    logger.info(message)


class AutoTagPipeline:
    """Runs generation and merge for a document, one run per document at a time.

    Status strings go to ``notifier`` (a host notice area, the CLI's stdout);
    every outcome, including failures, ends as a message rather than an
    exception.
    """

    def __init__(
        self,
        service: AIService,
        frontmatter: FrontmatterService,
        vault: Vault,
        notifier: Notifier | None = None,
        generate_properties: bool = False,
    ):
        self.service = service
        self.frontmatter = frontmatter
        self.vault = vault
        self.notify = notifier or _log_notice
        self.generate_properties = generate_properties
        self._in_flight: set[str] = set()

    def is_processing(self, document: Path | str) -> bool:
        return self._key(document) in self._in_flight

    def _key(self, document: Path | str) -> str:
        return document_key(self.vault.resolve(document))

    async def process_document(
        self,
        document: Path | str,
        text: str | None = None,
        force_update: bool = False,
        generate_properties: bool | None = None,
    ) -> bool:
        """Generate tags (or properties) for ``document`` and merge them in.

        Args:
            document: Document to update
            text: Text to analyze; the whole document body when omitted
            force_update: Ignore the existing-tag cap
            generate_properties: Override the pipeline's default mode

        Returns:
            True if the document was modified
        """
        key = self._key(document)
        if key in self._in_flight:
            logger.debug(f"{document} is already being processed")
            return False

        wants_properties = (
            self.generate_properties if generate_properties is None else generate_properties
        )
        self._in_flight.add(key)
        try:
            if text is None:
                text = await self._document_text(document)
                if text is None:
                    return False
            if wants_properties:
                return await self._process_properties(document, text, force_update)
            return await self._process_tags(document, text, force_update)
        finally:
            self._in_flight.discard(key)

    async def _document_text(self, document: Path | str) -> str | None:
        try:
            content = await self.vault.read(document)
        except OSError as e:
            logger.error(f"Could not read {document}: {e}")
            self.notify(f"Could not read note: {e.strerror or e}")
            return None
        except UnicodeDecodeError as e:
            logger.error(f"Could not decode {document}: {e}")
            self.notify("Could not read note: note is not valid UTF-8")
            return None
        try:
            _, body = split_document(content)
        except FrontmatterError:
            body = content
        return body

    async def _process_tags(self, document: Path | str, text: str, force_update: bool) -> bool:
        self.notify("Generating tags...")
        try:
            tags = await self.service.fetch_tags(text)
        except InputError:
            self.notify("Could not generate tags: the note is empty")
            return False

        if not tags:
            self.notify(f"Could not generate tags: {self.service.last_error or 'no tags found'}")
            return False

        result = await self.frontmatter.update_tags(document, tags, force_update)
        self.notify(result.message)
        return result.updated

    async def _process_properties(
        self, document: Path | str, text: str, force_update: bool
    ) -> bool:
        self.notify("Generating properties...")
        try:
            properties = await self.service.fetch_properties(text)
        except InputError:
            self.notify("Could not generate properties: the note is empty")
            return False

        if properties is None or not properties.is_usable:
            reason = self.service.last_error or "no tags found"
            self.notify(f"Could not generate properties: {reason}")
            return False

        result = await self.frontmatter.update_frontmatter(document, properties, force_update)
        self.notify(result.message)
        return result.updated
