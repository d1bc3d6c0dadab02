"""Cover letter generation from a job brief and the assembled context."""

from typing import Optional, Sequence

from .cancellation import CancellationToken
from .errors import GenerationFailed, RunCancelled
from .logging_config import get_logger
from .records import PortfolioItem
from .retry import RetryExecutor

logger = get_logger(__name__)


def build_prompt(
    job_brief: str,
    selected_portfolio: Sequence[PortfolioItem] = (),
    personal_context: Optional[str] = None,
    proposal_rules: Optional[str] = None,
) -> str:
    """Build the cover letter prompt.

    Sections for background, portfolio and rules are only included when
    there is something to put in them, and the instructions change to match.

    Args:
        job_brief: The job description, included verbatim
        selected_portfolio: Portfolio items to reference
        personal_context: Freelancer background text
        proposal_rules: Formatting and style rules to follow

    Returns:
        Prompt text
    """
    sections = [
        "You are an expert Upwork proposal writer. Write a compelling, personalized "
        "cover letter for the following job.",
        f'JOB BRIEF:\n"""\n{job_brief}\n"""',
    ]

    if personal_context:
        sections.append(f"ABOUT ME (the freelancer):\n{personal_context}")

    if selected_portfolio:
        portfolio_links = "\n".join(f"- {item.title}: {item.link}" for item in selected_portfolio)
        sections.append(f"RELEVANT PORTFOLIO LINKS:\n{portfolio_links}")

    if proposal_rules:
        sections.append(f"PROPOSAL RULES (follow these strictly):\n{proposal_rules}")

    instructions = [
        "Write in the first person, as the freelancer",
        "Use a natural, conversational tone; avoid generic or template-sounding phrases",
        "Write 3-5 short paragraphs that directly address the job requirements",
    ]
    if personal_context:
        instructions.append("Draw on the background above for relevant experience; do not invent experience")
    if selected_portfolio:
        instructions.append("Naturally incorporate the portfolio links where they support a point")
    if proposal_rules:
        instructions.append("Follow every proposal rule above strictly")
    instructions.append("Do NOT use placeholder text such as [Your Name]")
    instructions.append("End with a clear call to action")

    numbered = "\n".join(f"{i}. {line}" for i, line in enumerate(instructions, 1))
    sections.append(f"INSTRUCTIONS:\n{numbered}")
    sections.append("Return only the cover letter text.")

    return "\n\n".join(sections)


class LetterGenerator:
    """Produce the cover letter text with a single model call."""

    def __init__(self, executor: RetryExecutor, model_service):
        self.executor = executor
        self.model_service = model_service

    def generate(
        self,
        job_brief: str,
        selected_portfolio: Sequence[PortfolioItem] = (),
        personal_context: Optional[str] = None,
        proposal_rules: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Generate a cover letter.

        Raises:
            GenerationFailed: If the model could not be reached with any key
        """
        prompt = build_prompt(job_brief, selected_portfolio, personal_context, proposal_rules)

        logger.info(
            "Generating cover letter (portfolio=%d, background=%s, rules=%s)",
            len(selected_portfolio),
            personal_context is not None,
            proposal_rules is not None,
        )
        try:
            cover_letter = self.executor.complete(self.model_service, prompt, cancel_token=cancel_token)
        except RunCancelled:
            raise
        except Exception as e:
            raise GenerationFailed(f"Failed to generate cover letter: {e}") from e

        cover_letter = cover_letter.strip()
        logger.info("Generated cover letter, length: %d", len(cover_letter))
        return cover_letter
