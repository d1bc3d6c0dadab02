"""Model-driven choice of portfolio items for a job brief."""

import re
from typing import List, Optional, Sequence

from .cancellation import CancellationToken
from .errors import RunCancelled
from .logging_config import get_logger
from .records import PortfolioItem
from .retry import RetryExecutor

logger = get_logger(__name__)

MAX_SELECTED = 3
FALLBACK_COUNT = 2


def build_selection_prompt(job_brief: str, all_portfolio: Sequence[PortfolioItem]) -> str:
    """Build the prompt asking the model to pick relevant portfolio items."""
    portfolio_list = "\n".join(
        f"{i}. Title: {item.title}\n   Description: {item.description or 'N/A'}\n   Link: {item.link or 'N/A'}"
        for i, item in enumerate(all_portfolio, 1)
    )

    return f"""You are an expert at matching freelance portfolio work to Upwork job postings.

JOB BRIEF:
\"\"\"
{job_brief}
\"\"\"

PORTFOLIO ITEMS:
{portfolio_list}

Select the 2-3 portfolio items that are most relevant to this job.
Return ONLY their numbers, separated by commas, most relevant first (for example: 3, 1).
Do not include any other text."""


def parse_selection(response: str, count: int) -> List[int]:
    """Turn the model's reply into 0-based catalog indices.

    Every run of digits is read as a 1-based index. Out-of-range and
    repeated indices are dropped, the model's order is kept, and at most
    MAX_SELECTED indices are returned.

    Examples:
        >>> parse_selection("2, 4, 9", 5)
        [1, 3]
    """
    indices = []
    for match in re.findall(r"\d+", response or ""):
        index = int(match) - 1
        if 0 <= index < count and index not in indices:
            indices.append(index)
    return indices[:MAX_SELECTED]


class RelevanceSelector:
    """Ask the model which portfolio items fit a job brief.

    Selection never fails the run: if the model call fails or its answer
    cannot be parsed, the first FALLBACK_COUNT catalog items are used.
    """

    def __init__(self, executor: RetryExecutor, model_service):
        self.executor = executor
        self.model_service = model_service

    def select(
        self,
        job_brief: str,
        all_portfolio: Sequence[PortfolioItem],
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[PortfolioItem]:
        """Pick up to three portfolio items for the job.

        Args:
            job_brief: The job description
            all_portfolio: Full portfolio catalog, in catalog order
            cancel_token: Optional cancellation token

        Returns:
            Selected items in the order the model ranked them
        """
        all_portfolio = list(all_portfolio)
        if not all_portfolio:
            return []

        prompt = build_selection_prompt(job_brief, all_portfolio)

        try:
            response = self.executor.complete(self.model_service, prompt, cancel_token=cancel_token)
        except RunCancelled:
            raise
        except Exception as e:
            logger.warning("Portfolio selection failed, using first %d items: %s", FALLBACK_COUNT, e)
            return all_portfolio[:FALLBACK_COUNT]

        indices = parse_selection(response, len(all_portfolio))
        if not indices:
            logger.warning("No usable portfolio indices in response %r, using first %d items", response, FALLBACK_COUNT)
            return all_portfolio[:FALLBACK_COUNT]

        selected = [all_portfolio[i] for i in indices]
        logger.info("Selected portfolio items: %s", ", ".join(item.title for item in selected))
        return selected
