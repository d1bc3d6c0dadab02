"""End-to-end proposal generation run."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .cancellation import CancellationToken, check_cancelled
from .context import ContextAssembler
from .errors import GenerationFailed, RunCancelled
from .generator import LetterGenerator
from .logging_config import get_logger
from .records import PortfolioItem
from .selector import RelevanceSelector

logger = get_logger(__name__)

StatusCallback = Callable[[str], None]

FINAL_ERROR_MESSAGE = "Failed to generate proposal. Please check your API key and try again."


@dataclass
class ProposalArtifact:
    """A generated proposal.

    text is replaced on every accepted revision; portfolio_used is fixed
    when the proposal is first generated.
    """
    text: str
    portfolio_used: int = 0


class ProposalOrchestrator:
    """Run the generation stages in order and report progress.

    Stages:
        1. Load personal context
        2. Load proposal rules
        3. Load portfolio catalog
        4. Select relevant portfolio items
        5. Generate the cover letter

    If any stage fails, one last-resort generation is attempted with no
    background, rules or portfolio before the run gives up.
    """

    def __init__(
        self,
        assembler: ContextAssembler,
        selector: RelevanceSelector,
        generator: LetterGenerator,
    ):
        self.assembler = assembler
        self.selector = selector
        self.generator = generator

    @staticmethod
    def _report(on_status: Optional[StatusCallback], message: str) -> None:
        logger.info(message)
        if on_status is None:
            return
        try:
            on_status(message)
        except Exception as e:
            logger.warning("Status callback raised: %s", e)

    def _run_pipeline(
        self,
        job_brief: str,
        on_status: Optional[StatusCallback],
        cancel_token: Optional[CancellationToken],
    ) -> ProposalArtifact:
        check_cancelled(cancel_token)
        self._report(on_status, "Loading your background...")
        personal_context = self.assembler.load_personal_context()

        check_cancelled(cancel_token)
        self._report(on_status, "Loading proposal rules...")
        proposal_rules = self.assembler.load_proposal_rules()

        check_cancelled(cancel_token)
        self._report(on_status, "Loading portfolio...")
        all_portfolio = self.assembler.load_portfolio()

        check_cancelled(cancel_token)
        self._report(on_status, "Selecting relevant portfolio items...")
        selected: List[PortfolioItem] = self.selector.select(job_brief, all_portfolio, cancel_token=cancel_token)

        check_cancelled(cancel_token)
        self._report(on_status, "Generating your cover letter...")
        cover_letter = self.generator.generate(
            job_brief,
            selected,
            personal_context=personal_context,
            proposal_rules=proposal_rules,
            cancel_token=cancel_token,
        )

        return ProposalArtifact(text=cover_letter, portfolio_used=len(selected))

    def run(
        self,
        job_brief: str,
        on_status: Optional[StatusCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ProposalArtifact:
        """Generate a proposal for a job brief.

        Args:
            job_brief: The job description
            on_status: Called with a human-readable message before each stage
            cancel_token: Checked at every stage boundary

        Returns:
            ProposalArtifact with the letter and the number of portfolio items used

        Raises:
            ValueError: If the job brief is blank
            RunCancelled: If the token was cancelled
            GenerationFailed: If both the full run and the last-resort generation failed
        """
        if not job_brief or not job_brief.strip():
            raise ValueError("Job brief must not be empty")

        logger.info("Starting proposal generation (brief length: %d)", len(job_brief))

        try:
            artifact = self._run_pipeline(job_brief, on_status, cancel_token)
            logger.info("Proposal generation complete")
            return artifact
        except RunCancelled:
            raise
        except Exception as e:
            logger.error("Proposal generation failed, trying basic cover letter: %s", e)

        # Last resort: generate without any stored data
        check_cancelled(cancel_token)
        self._report(on_status, "Generating basic cover letter...")
        try:
            cover_letter = self.generator.generate(job_brief, [], cancel_token=cancel_token)
        except RunCancelled:
            raise
        except Exception as fallback_error:
            logger.error("Fallback generation also failed: %s", fallback_error)
            raise GenerationFailed(FINAL_ERROR_MESSAGE) from fallback_error

        return ProposalArtifact(text=cover_letter, portfolio_used=0)
