"""BaseAgent interface for all agents."""
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..data.database import SessionLocal
from ..schemas.io_models import AgentResult, ClassificationResult
from ..utils.logger import get_logger

logger = get_logger("agents")

class BaseAgent(ABC):
    name: str = "base"
    error_message: str = "Sorry, I encountered an error while retrieving that information."

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    @abstractmethod
    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        """Return the formatted reply for one message. Never writes to the database."""
        ...

    def _ok(self, response: str, **facts: Any) -> AgentResult:
        return AgentResult(agent=self.name, intent=self.name, response=response, facts=facts)

    def _failed(self, error: Exception) -> AgentResult:
        logger.exception(f"[{self.name.upper()}] {type(error).__name__}: {error}")
        return AgentResult(agent=self.name, intent=self.name, response=self.error_message,
                           facts={"error": str(error)})


def fmt_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value else "N/A"

def fmt_money(value) -> str:
    return f"₹{value or 0:.2f}"
