"""Read-side access to portfolio items, personal context and proposal rules."""

import json
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

from .errors import CollaboratorReadError, StoreStructureError


class SingletonKind(Enum):
    """Single-row records the pipeline reads."""
    PERSONAL_CONTEXT = "personal_context"
    PROPOSAL_RULES = "proposal_rules"


@dataclass(frozen=True)
class PortfolioItem:
    """A portfolio entry the freelancer can link to in a proposal."""
    id: str
    title: str
    link: str = ""
    description: str = ""

    def to_dict(self):
        return asdict(self)

    @staticmethod
    def from_dict(data: dict):
        return PortfolioItem(
            id=str(data["id"]),
            title=data["title"],
            link=data.get("link") or "",
            description=data.get("description") or "",
        )


@dataclass(frozen=True)
class Present:
    """A singleton record that exists."""
    value: str


@dataclass(frozen=True)
class Absent:
    """A singleton record that does not exist."""
    reason: str = "not found"


SingletonRecord = Union[Present, Absent]


class RecordStore:
    """Interface the pipeline uses to read stored records."""

    def list_portfolio_items(self) -> List[PortfolioItem]:
        raise NotImplementedError

    def get_singleton(self, kind: SingletonKind) -> SingletonRecord:
        raise NotImplementedError


class JsonRecordStore(RecordStore):
    """Record store backed by a JSON file.

    The file holds one list of rows per table:

        {
          "portfolio_items": [{"id": 1, "title": "...", "link": "...", "description": "..."}],
          "personal_context": [{"content": "..."}],
          "proposal_rules": [{"content": "..."}]
        }

    The file is read on every call so edits show up without a restart.
    """

    PORTFOLIO_TABLE = "portfolio_items"

    def __init__(self, data_file: Path):
        """Initialize the store.

        Args:
            data_file: Path to the JSON data file. A missing file is an empty store.
        """
        self.data_file = Path(data_file)

    def _load(self) -> Dict[str, Any]:
        if not self.data_file.exists():
            return {}

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CollaboratorReadError(f"Could not read {self.data_file}: {e}") from e

        if not isinstance(data, dict):
            raise StoreStructureError(f"{self.data_file} must contain a JSON object")
        return data

    def _rows(self, data: Dict[str, Any], table: str) -> List[Dict[str, Any]]:
        rows = data.get(table) or []
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise StoreStructureError(f"Table '{table}' must be a list of objects")
        return rows

    def list_portfolio_items(self) -> List[PortfolioItem]:
        """Return every portfolio item, oldest first.

        Raises:
            CollaboratorReadError: If the file cannot be read or a row is malformed
        """
        rows = self._rows(self._load(), self.PORTFOLIO_TABLE)

        # Rows without created_at keep their file order after dated rows
        ordered = sorted(
            enumerate(rows),
            key=lambda pair: (pair[1].get("created_at") is None, str(pair[1].get("created_at") or ""), pair[0]),
        )

        items = []
        for _, row in ordered:
            try:
                items.append(PortfolioItem.from_dict(row))
            except KeyError as e:
                raise StoreStructureError(f"Portfolio item is missing field {e}") from e
        return items

    def get_singleton(self, kind: SingletonKind) -> SingletonRecord:
        """Return the single record of the given kind.

        Raises:
            CollaboratorReadError: If the file cannot be read
            StoreStructureError: If there is more than one row or the row has no content
        """
        rows = self._rows(self._load(), kind.value)

        if not rows:
            return Absent()
        if len(rows) > 1:
            raise StoreStructureError(f"Expected at most one '{kind.value}' record, found {len(rows)}")

        content = rows[0].get("content")
        if content is None:
            raise StoreStructureError(f"'{kind.value}' record has no content field")
        if not str(content).strip():
            return Absent("empty")
        return Present(str(content))
