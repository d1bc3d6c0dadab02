"""Gather the stored inputs a proposal needs."""

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import CollaboratorReadError, StoreStructureError
from .logging_config import get_logger
from .records import Present, PortfolioItem, RecordStore, SingletonKind

logger = get_logger(__name__)


@dataclass
class AssembledContext:
    """Everything read from the store for one generation run."""
    personal_context: Optional[str] = None
    proposal_rules: Optional[str] = None
    all_portfolio: List[PortfolioItem] = field(default_factory=list)


class ContextAssembler:
    """Read personal context, proposal rules and the portfolio catalog.

    The two singletons are optional: a missing record or a failed read
    yields None. Structural errors (duplicate or malformed records) are
    not a "not found" case and propagate. The catalog read has no default
    and always propagates its errors.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def _load_singleton(self, kind: SingletonKind) -> Optional[str]:
        try:
            record = self.store.get_singleton(kind)
        except StoreStructureError:
            raise
        except CollaboratorReadError as e:
            logger.warning("Could not read %s, continuing without it: %s", kind.value, e)
            return None

        if isinstance(record, Present):
            return record.value

        logger.info("No %s record found (%s)", kind.value, record.reason)
        return None

    def load_personal_context(self) -> Optional[str]:
        return self._load_singleton(SingletonKind.PERSONAL_CONTEXT)

    def load_proposal_rules(self) -> Optional[str]:
        return self._load_singleton(SingletonKind.PROPOSAL_RULES)

    def load_portfolio(self) -> List[PortfolioItem]:
        """Read the full portfolio catalog.

        Raises:
            CollaboratorReadError: If the catalog cannot be read
        """
        try:
            items = list(self.store.list_portfolio_items())
        except CollaboratorReadError:
            raise
        except Exception as e:
            raise CollaboratorReadError(f"Could not read portfolio items: {e}") from e

        if not items:
            logger.info("Portfolio catalog is empty")
        return items

    def assemble(self) -> AssembledContext:
        return AssembledContext(
            personal_context=self.load_personal_context(),
            proposal_rules=self.load_proposal_rules(),
            all_portfolio=self.load_portfolio(),
        )
