"""Interaction Agent: pairwise drug-interaction analysis.

Known substances are answered from the knowledge base. Anything else goes to the
external lookup client, which is best-effort: an empty result turns into a
"consult your healthcare provider" notice, never an error.
"""
import re
from typing import List, Optional

from .base_agent import BaseAgent
from ..app.external_lookup import ExternalLookupClient, collect, get_lookup_client
from ..data.knowledge_base import DRUG_INTERACTIONS, get_drug, lookup_combination
from ..nlu import rules
from ..nlu.entity_extractor import EntityExtractor
from ..schemas.io_models import AgentResult, ClassificationResult, InteractionPair, InteractionReport


MAX_EXTERNAL_INTERACTIONS = 3
MAX_EXTERNAL_SIDE_EFFECTS = 2
MAX_LOOKUP_CANDIDATES = 2
KEY_INFO_LENGTH = 150
CONSULT_NOTICE = "Consult healthcare provider for detailed information"


def _unique(items: List[str]) -> List[str]:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


def find_pairs(medications: List[str], both_directions: bool = False) -> List[InteractionPair]:
    """Every unordered pair (i < j) whose first member lists the second.

    With ``both_directions`` the reverse edge is checked too, so a pair may be
    reported twice when both profiles list each other.
    """
    pairs: List[InteractionPair] = []
    meds = [m.lower().strip() for m in medications]
    for i, first in enumerate(meds):
        for second in meds[i + 1:]:
            ordered = [(first, second), (second, first)] if both_directions else [(first, second)]
            for a, b in ordered:
                profile = DRUG_INTERACTIONS.get(a)
                if profile and profile.interacts_with(b):
                    pairs.append(InteractionPair(medication1=a, medication2=b, warning=profile.warnings))
    return pairs


def check_drug_interactions(medications: List[str]) -> InteractionReport:
    """Structured interaction check used by the /drug-interactions endpoint."""
    meds = [m.lower().strip() for m in medications]
    pairs = find_pairs(meds, both_directions=True)
    warnings: List[str] = []
    for name in _unique(meds):
        profile = DRUG_INTERACTIONS.get(name)
        if profile:
            warnings.extend(c for c in profile.contraindications if c not in warnings)
    return InteractionReport(
        medications=medications,
        interactions=pairs,
        warnings=warnings,
        has_interactions=bool(pairs),
        severity="HIGH" if pairs else "LOW",
    )


def candidate_words(query: str) -> List[str]:
    """Guess medication names: longer words that are not interaction vocabulary."""
    words = re.findall(r"[a-z][a-z0-9-]*", query.lower())
    return _unique([w for w in words if len(w) > 3 and w not in rules.INTERACTION_STOPWORDS])


class InteractionAgent(BaseAgent):
    name = "interaction"

    def __init__(self, session_factory=None, lookup: Optional[ExternalLookupClient] = None,
                 extractor: Optional[EntityExtractor] = None):
        super().__init__(session_factory)
        self.lookup = lookup
        self.extractor = extractor or EntityExtractor()

    @property
    def client(self) -> ExternalLookupClient:
        if self.lookup is None:
            self.lookup = get_lookup_client()
        return self.lookup

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing InteractionAgent...")
        meds = analysis.medications if analysis else self.extractor.find_medications(query)
        meds = _unique([m.lower().strip() for m in meds if m and m.strip()])
        known = [m for m in meds if m in DRUG_INTERACTIONS]

        if len(known) >= 2:
            return self._analyse(meds)
        return self._fallback(query)

    def _analyse(self, meds: List[str]) -> AgentResult:
        text = "**Drug Interaction Analysis**\n\n"
        text += f"**Analyzing interactions for:** {', '.join(meds)}\n\n"

        pairs = find_pairs(meds)
        if pairs:
            text += "**INTERACTIONS FOUND:**\n"
            text += "".join(f"• {p.medication1} + {p.medication2}: {p.warning}\n" for p in pairs)
        else:
            text += "**No known harmful interactions detected.**\n"

        text += "\n**Individual Medication Information:**\n"
        unknown = []
        for med in meds:
            if med in DRUG_INTERACTIONS:
                text += self._profile_section(med)
            else:
                unknown.append(med)
                text += self._external_section(med)

        if unknown:
            text += "\n\n**External Information Search:**\n"
            text += "The following medications were not in our database:\n"
            text += "".join(f"• {m}\n" for m in unknown)
            text += ("\n**Recommendation:** Always consult your healthcare provider or pharmacist "
                     "for complete drug interaction information.\n")

        return self._ok(text, medications=meds, interactions=[p.model_dump() for p in pairs], unknown=unknown)

    def _profile_section(self, med: str) -> str:
        info = get_drug(med)
        return (f"\n**{med.upper()}:**\n"
                f"• Category: {info.category}\n"
                f"• Dosage: {info.dosage}\n"
                f"• Side Effects: {', '.join(info.side_effects)}\n"
                f"• Contraindications: {', '.join(info.contraindications)}\n")

    def _external_section(self, med: str) -> str:
        results = self.client.search(med)
        if not results:
            return (f"\n**{med.upper()}:**\n"
                    "• Status: No information available in database\n"
                    f"• Recommendation: {CONSULT_NOTICE}\n")

        text = f"\n**{med.upper()}:**\n• Status: External information retrieved\n"
        interactions = collect(results, "interactions", MAX_EXTERNAL_INTERACTIONS)
        if interactions:
            text += "• External Interaction Info:\n" + "".join(f"  - {s}\n" for s in interactions)
        side_effects = collect(results, "side_effects", MAX_EXTERNAL_SIDE_EFFECTS)
        if side_effects:
            text += "• External Side Effects:\n" + "".join(f"  - {s}\n" for s in side_effects)
        return text

    def _fallback(self, query: str) -> AgentResult:
        text = "**Drug Interaction Analysis**\n\n"
        candidates = candidate_words(query)
        if len(candidates) < 2:
            text += "Please specify the medications you want to check for interactions.\n\n"
            text += "**Available medications in database:**\n"
            text += "".join(f"• {name}\n" for name in DRUG_INTERACTIONS)
            return self._ok(text, medications=[], candidates=candidates)

        looked_up = candidates[:MAX_LOOKUP_CANDIDATES]
        missing = [m for m in looked_up if m not in DRUG_INTERACTIONS]
        if missing:
            text += f"**Searching for external information for:** {', '.join(missing)}\n\n"
            text += f"**Note:** Not in our local database: {', '.join(missing)}.\n"
            text += "**Attempting to retrieve external information...**\n\n"

        for med in looked_up:
            if med in DRUG_INTERACTIONS:
                text += self._profile_section(med) + "\n"
                continue
            text += f"**{med.upper()}:**\n"
            results = self.client.search(med)
            if not results:
                text += "• Status: No information available\n"
                text += f"• Recommendation: {CONSULT_NOTICE}\n\n"
                continue
            text += "• Status: Information available\n"
            key_info = collect(results, "interactions", 1)
            if key_info:
                text += f"• Key Info: {key_info[0][:KEY_INFO_LENGTH]}...\n"
            text += "\n"

        text += "\n**DIRECT INTERACTION ANALYSIS:**\n"
        verdict = lookup_combination(looked_up[0], looked_up[1])
        if verdict:
            text += f"**{verdict.headline}**\n"
            text += "".join(f"• {line}\n" for line in verdict.details) + "\n"
        else:
            text += "**GENERAL INTERACTION ASSESSMENT:**\n"
            text += "• **Status:** No known harmful interactions detected\n"
            text += "• **Recommendation:** Monitor for any unusual side effects\n"
            text += "• **Note:** Always follow your doctor's instructions\n\n"

        text += ("**Important:** Always consult your healthcare provider for complete "
                 "drug interaction information.\n")
        text += "\n**Sources:** Drugs.com, WebMD, Mayo Clinic\n"
        return self._ok(text, medications=looked_up,
                        verdict=verdict.level if verdict else "unknown")
