from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class HistoryRecord:
    """One row of the conversation history table."""

    phone: str
    keyword: str
    answer: str
    ref: str = ""
    ref_serialize: str = ""
    options: dict[str, object] = field(default_factory=dict)
    id: int | None = None
    created_at: datetime | None = None
