"""Medical Agent: condition summaries from the knowledge base with an external fallback."""
import re
from typing import List, Optional

from .base_agent import BaseAgent
from ..app.external_lookup import ExternalLookupClient, get_lookup_client, results_to_text
from ..data.knowledge_base import MEDICAL_KNOWLEDGE, get_condition
from ..nlu import rules
from ..nlu.entity_extractor import EntityExtractor
from ..schemas.io_models import AgentResult, ClassificationResult

MIN_EXTERNAL_TEXT = 50


def medical_terms(query: str) -> List[str]:
    """Letters-only words that look medical: a known condition word or longer than 4."""
    terms = []
    for word in query.split():
        if len(word) <= 3:
            continue
        clean = re.sub(r"[^a-z]", "", word.lower())
        if clean in rules.COMMON_CONDITIONS or len(clean) > 4:
            terms.append(clean)
    return terms


def _condition_list() -> str:
    return "".join(f"• {name}\n" for name in MEDICAL_KNOWLEDGE)


class MedicalAgent(BaseAgent):
    name = "medical"

    def __init__(self, session_factory=None, lookup: Optional[ExternalLookupClient] = None,
                 extractor: Optional[EntityExtractor] = None):
        super().__init__(session_factory)
        self.lookup = lookup
        self.extractor = extractor or EntityExtractor()

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing MedicalAgent...")
        conditions = analysis.conditions if analysis else self.extractor.find_conditions(query)
        text = "**Medical Information**\n\n"

        if conditions:
            for name in conditions:
                info = get_condition(name)
                text += f"**{name.upper()}:**\n"
                text += f"• Symptoms: {', '.join(info.symptoms)}\n"
                text += f"• Treatments: {', '.join(info.treatments)}\n"
                text += f"• Complications: {', '.join(info.complications)}\n"
                text += f"• Prevention: {', '.join(info.prevention)}\n\n"
            return self._ok(text, branch="knowledge_base", conditions=list(conditions))

        terms = medical_terms(query) if rules.has_medical_keywords(query) else []
        if not terms:
            text += "Please specify a medical condition for more information.\n\n"
            text += "**Available conditions:**\n" + _condition_list()
            return self._ok(text, branch="prompt")

        text += "**Searching for medical information...**\n\n"
        text += f"**Query:** {query}\n"
        text += f"**Extracted terms:** {', '.join(terms)}\n\n"

        client = self.lookup or get_lookup_client()
        external = results_to_text(client.search(" ".join(terms)))
        if len(external.strip()) > MIN_EXTERNAL_TEXT:
            text += f"**External Medical Information:**\n{external}\n\n"
            return self._ok(text, branch="external", terms=terms)

        text += "**Note:** Limited information available for this query.\n"
        text += "**Try asking about:**\n" + _condition_list()
        return self._ok(text, branch="limited", terms=terms)
