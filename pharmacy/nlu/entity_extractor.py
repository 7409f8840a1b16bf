"""Very small rule-based entity extractor for the pharmacy domain."""
import re
from typing import Any, Dict, List, Mapping, Optional

from . import rules
from ..data.knowledge_base import DRUG_INTERACTIONS, MEDICAL_KNOWLEDGE

BETWEEN_PATTERN = re.compile(r"between\s+([^,\s]+(?:\s+[^,\s]+)*?)\s+and\s+([^,\s]+(?:\s+[^,\s]+)*?)", re.IGNORECASE)
WITH_PATTERN = re.compile(r"([^,\s]+(?:\s+[^,\s]+)*?)\s+with\s+([^,\s]+(?:\s+[^,\s]+)*?)", re.IGNORECASE)


def extract_candidate_pair(text: str) -> List[str]:
    """Pull two free-form medication names out of 'between X and Y' or 'X with Y'.

    Returns an empty list when neither template matches.
    """
    t = text.lower()
    m = BETWEEN_PATTERN.search(t) or WITH_PATTERN.search(t)
    if not m:
        return []
    first, second = (g.strip().strip("?.!") for g in m.groups())
    if not first or not second:
        return []
    return [first, second]


class EntityExtractor:
    def __init__(self, drugs: Optional[Mapping[str, Any]] = None, conditions: Optional[Mapping[str, Any]] = None):
        self.drugs = drugs if drugs is not None else DRUG_INTERACTIONS
        self.conditions = conditions if conditions is not None else MEDICAL_KNOWLEDGE

    def find_medications(self, text: str) -> List[str]:
        t = text.lower()
        return [name for name in self.drugs if name in t]

    def find_conditions(self, text: str) -> List[str]:
        t = text.lower()
        return [name for name in self.conditions if name in t]

    def extract(self, text: str) -> Dict[str, Any]:
        t = text.lower()
        return {
            "medications": self.find_medications(t),
            "conditions": self.find_conditions(t),
            "has_stock_keywords": rules.has_stock_keywords(t),
            "has_interaction_keywords": rules.has_interaction_keywords(t),
            "has_customer_keywords": rules.has_customer_keywords(t),
            "has_sales_keywords": rules.has_sales_keywords(t),
            "has_medical_keywords": rules.has_medical_keywords(t),
            "has_general_keywords": rules.has_general_keywords(t),
        }
