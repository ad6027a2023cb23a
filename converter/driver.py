"""
Conversion Driver

Runs one Markdown → document conversion: parse, project every top-level block
onto the sink, commit, and report the result as a `ConversionOutcome`.
"""

import logging
from dataclasses import dataclass, field

from core.config import ConversionConfig
from core.container import MarkupParserProtocol, get_container
from core.errors import CapabilityUnavailable, ConversionFailure, ConversionWarning, ParseFailure, SinkFailure
from converter.projector import BlockProjector, ListContext
from converter.sink import DocumentSink

logger = logging.getLogger(__name__)


@dataclass
class ConversionOutcome:
    """
    Result of a conversion.

    Attributes:
        warnings: Non-fatal problems in document order.
        error: The fatal failure that stopped the conversion, if any.
        blocks: Number of top-level blocks fully projected.
        commits: Number of commits that completed.
    """

    warnings: list[ConversionWarning] = field(default_factory=list)
    error: ConversionFailure | None = None
    blocks: int = 0
    commits: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the recorded failure, if there is one."""
        if self.error is not None:
            raise self.error

    def summary(self) -> str:
        status = "succeeded" if self.ok else f"failed: {self.error}"
        counts = f"{self.blocks} block(s), {self.commits} commit(s), {len(self.warnings)} warning(s)"
        return f"Conversion {status} ({counts})"


class ConversionDriver:
    """
    Orchestrates parsing, projection and committing.

    Collaborators default to those of the global container, so tests can
    swap the parser or configuration with `set_container`.
    """

    def __init__(
        self,
        parser: MarkupParserProtocol | None = None,
        config: ConversionConfig | None = None,
    ) -> None:
        container = get_container()
        self.parser = parser or container.parser
        self.config = config or container.config

    async def convert(self, markdown_source: str, sink: DocumentSink) -> ConversionOutcome:
        """
        Convert Markdown source into the document behind `sink`.

        Fatal failures are reported through the outcome rather than raised;
        call `raise_for_error()` on it to get exception semantics.

        Args:
            markdown_source: Raw Markdown text.
            sink: The document host to write to.

        Returns:
            ConversionOutcome with warnings, block and commit counts, and the error if one occurred.
        """
        outcome = ConversionOutcome()

        try:
            root = self.parser.render(markdown_source)
        except ParseFailure as e:
            logger.error(f"Could not parse Markdown input: {e}")
            outcome.error = e
            return outcome
        except Exception as e:
            logger.exception("Unexpected error while parsing Markdown input")
            outcome.error = ParseFailure(f"Could not parse Markdown input: {e}")
            return outcome

        logger.info(f"Converting {len(root.children)} top-level node(s)")
        projector = BlockProjector(sink, self.config)
        commit_every = self.config.commit_every

        try:
            for node in root.children:
                projector.project(node, ListContext(), outcome.warnings)
                outcome.blocks += 1
                if commit_every and outcome.blocks % commit_every == 0:
                    logger.debug(f"Periodic commit after {outcome.blocks} block(s)")
                    await sink.commit()
                    outcome.commits += 1

            await sink.commit()
            outcome.commits += 1
        except SinkFailure as e:
            logger.error(f"Conversion aborted after {outcome.blocks} block(s): {e}")
            outcome.error = e
        except CapabilityUnavailable as e:
            # A required structural operation the host does not offer
            logger.error(f"Conversion aborted after {outcome.blocks} block(s): {e}")
            outcome.error = SinkFailure(str(e))
        except ConversionFailure as e:
            logger.error(f"Conversion aborted after {outcome.blocks} block(s): {e}")
            outcome.error = e
        except Exception as e:
            logger.exception(f"Unexpected error after {outcome.blocks} block(s)")
            outcome.error = ConversionFailure(f"Conversion failed unexpectedly: {e}")

        if outcome.error is not None:
            outcome.error.warnings = list(outcome.warnings)
        logger.info(outcome.summary())
        return outcome


async def convert_markdown(
    markdown_source: str, sink: DocumentSink, config: ConversionConfig | None = None
) -> ConversionOutcome:
    """Convert with a default driver."""
    return await ConversionDriver(config=config).convert(markdown_source, sink)
