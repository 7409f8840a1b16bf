"""General Agent: canned greeting, help, thanks and goodbye replies."""
from typing import Optional

from .base_agent import BaseAgent
from ..schemas.io_models import AgentResult, ClassificationResult

GREETING = """**Hello! Welcome to your Pharmacy AI Assistant!**

I'm here to help you with:
• **Stock Management** - Check inventory, find products, track low stock
• **Drug Information** - Check interactions, side effects, dosage
• **Customer Data** - Loyalty points, customer information
• **Sales Reports** - Revenue analysis, transaction history
• **Medical Info** - Symptoms, treatments, health advice

**Try asking:**
• "location of [product name]"
• "check interactions between aspirin and warfarin"
• "most visited customer"
• "show me sales report"
• "low stock items"

How can I assist you today?"""

CAPABILITIES = """**AI Assistant Capabilities**

**Stock Management:**
• Check stock levels and inventory
• Find product locations (rack/shelf)
• Track low stock and expiring items
• Most popular products analysis

**Drug Information:**
• Check drug interactions
• Side effects and contraindications
• Dosage information
• Safety warnings

**Customer Management:**
• Customer loyalty points
• Most frequent customers
• Customer analytics

**Sales & Reports:**
• Sales reports and revenue analysis
• Transaction history
• Profit analysis

**Medical Information:**
• Symptoms and conditions
• Treatment options
• Health advice

**Examples:**
• "location of DOLO 650"
• "check interactions between aspirin and warfarin"
• "most visited customer"
• "show me sales report"

What would you like to know?"""

THANKS = """**You're welcome!**

I'm here to help whenever you need assistance with pharmacy management, drug information, or any other queries. Feel free to ask anything!"""

GOODBYE = """**Goodbye!**

Thank you for using the Pharmacy AI Assistant. Have a great day! If you need help later, just say "hi" to get started again."""

HOW_ARE_YOU = """**I'm functioning perfectly!**

Ready to help you with all your pharmacy management needs. How can I assist you today?"""

DEFAULT = """**AI Assistant Response**

I understand you're asking: "{message}"

I can help you with:
• **Stock queries** - "location of [product]", "low stock items"
• **Drug interactions** - "check interactions between [drug1] and [drug2]"
• **Customer info** - "most visited customer", "loyalty points"
• **Sales reports** - "show me sales report", "revenue analysis"
• **Medical info** - "symptoms of diabetes", "treatment for asthma"

**Try asking something specific like:**
• "location of DOLO 650"
• "check interactions between aspirin and warfarin"
• "most visited customer"
• "show me sales report"

What would you like to know?"""

# First match wins
TEMPLATES = (
    ("greeting", ("hi", "hello", "hey"), GREETING),
    ("help", ("help", "what can you do", "capabilities"), CAPABILITIES),
    ("thanks", ("thank",), THANKS),
    ("goodbye", ("bye", "goodbye"), GOODBYE),
    ("how_are_you", ("how are you",), HOW_ARE_YOU),
)


class GeneralAgent(BaseAgent):
    name = "general"

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing GeneralAgent...")
        q = query.lower()
        for template, triggers, text in TEMPLATES:
            if any(t in q for t in triggers):
                return self._ok(text, template=template)
        return self._ok(DEFAULT.format(message=query), template="default")
