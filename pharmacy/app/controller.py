"""Controller / Orchestrator: classify a chat message and route it to one agent."""
from typing import Any, Dict, Optional

from ..agents.base_agent import BaseAgent
from ..agents.customer_agent import CustomerAgent
from ..agents.general_agent import GeneralAgent
from ..agents.interaction_agent import InteractionAgent
from ..agents.medical_agent import MedicalAgent
from ..agents.sales_agent import SalesAgent
from ..agents.stock_agent import StockAgent
from ..nlu.intent_model import IntentModel, get_intent_model
from .external_lookup import ExternalLookupClient
from ..utils.logger import get_logger

logger = get_logger()


def build_agent_map(session_factory=None, lookup: Optional[ExternalLookupClient] = None) -> Dict[str, BaseAgent]:
    return {
        "stock": StockAgent(session_factory),
        "customer": CustomerAgent(session_factory),
        "sales": SalesAgent(session_factory),
        "interaction": InteractionAgent(session_factory, lookup=lookup),
        "medical": MedicalAgent(session_factory, lookup=lookup),
        "general": GeneralAgent(session_factory),
    }


class Controller:
    def __init__(self, session_factory=None, lookup: Optional[ExternalLookupClient] = None,
                 intent_model: Optional[IntentModel] = None):
        self.intent_model = intent_model or get_intent_model()
        self.agents = build_agent_map(session_factory, lookup)

    def handle_query(self, query: str, context: str = "general") -> Dict[str, Any]:
        print("\n" + "=" * 50)
        print(f"[WORKFLOW] 1. Controller received query: '{query}' (context={context})")

        print("[WORKFLOW] 2. Classifying intent...")
        analysis = self.intent_model.classify(query)
        print(f"[WORKFLOW] 2a. Intent: {analysis.category} (raw={analysis.original_category}, "
              f"confidence={analysis.confidence})")
        print(f"[WORKFLOW] 2b. Medications: {analysis.medications} Conditions: {analysis.conditions}")

        agent = self.agents.get(analysis.category, self.agents["general"])
        print(f"[WORKFLOW] 3. Dispatching to agent: '{agent.name}'")
        result = agent.handle(query, analysis)
        logger.info(f"[CHAT] intent={analysis.category} agent={result.agent} chars={len(result.response)}")

        print("[WORKFLOW] 4. Response ready.")
        print("=" * 50 + "\n")
        return {
            "response": result.response,
            "context": context,
            "analysis": analysis,
            "facts": result.facts,
        }
