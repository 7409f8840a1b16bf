"""
PHARMACY ASSISTANT: System Documentation
========================================

Module-style README for the pharmacy back end: record keeping for stock,
customers, sales, purchases, products and suppliers, plus a rule-based chat
assistant that answers questions over those records and a built-in drug and
condition knowledge base.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Backend Components
4. Data & Persistence
5. NLU & Agent Routing
6. External Lookup
7. HTTP Surface
8. Configuration & Environment
9. Data Lifecycle
10. Testing Strategy
11. Observability
12. Troubleshooting

"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    The assistant classifies each chat message into one of six intents
    (stock, customer, sales, interaction, medical, general) with a keyword
    priority cascade, then hands it to one agent that formats a markdown-ish
    reply from the database or the knowledge base. Nothing is generated by an
    LLM; every answer is deterministic given the records.
    """,
)


ARCHITECTURE = section(
    "2. Architecture",
    """
    - Backend: FastAPI app exposing `/api/chatbot/*` and the `/api/<records>` routes.
    - NLU: substring vocabularies + a priority cascade; a small Naive Bayes model
      supplies the raw `originalCategory` label only.
    - Agents: stock, customer, sales, interaction, medical, general.
    - Data: SQLite via SQLAlchemy; static knowledge tables in `knowledge_base.py`.
    - External lookup: concurrent best-effort scraping of public drug reference pages.
    """,
)


BACKEND_COMPONENTS = section(
    "3. Backend Components",
    """
    app/
      - main.py: FastAPI app, CORS, error envelopes, chatbot routes.
      - controller.py: Classify, dispatch to one agent, assemble the reply.
      - records.py: CRUD routers, sale/loyalty accounting, near-expiry discounts.
      - insights.py: Dashboard counts and the three canned reports.
      - external_lookup.py: requests + BeautifulSoup scraping on a thread pool.
      - config.py: Env-driven configuration and thresholds.

    agents/
      - base_agent.py: Agent contract and shared formatting helpers.
      - stock_agent.py: Locations, top sellers, alerts, overview.
      - customer_agent.py: Loyalty leaderboard and overview.
      - sales_agent.py: Today's takings and recent transactions.
      - interaction_agent.py: Pairwise interaction analysis and the structured check.
      - medical_agent.py: Condition summaries with an external fallback.
      - general_agent.py: Greeting, help, thanks, goodbye.

    nlu/
      - rules.py: Keyword vocabularies.
      - entity_extractor.py: Substances, conditions and free-text name pairs.
      - intent_model.py: Priority cascade and confidence score.

    data/
      - models.py/database.py: SQLAlchemy models and session management.
      - knowledge_base.py: Drug interaction and condition tables.
      - populate_db.py: Seed the stock table from `raw/stock.csv`.
    """,
)


DATA_AND_PERSISTENCE = section(
    "4. Data & Persistence",
    """
    - Entities: Stock, Customer, Sale/SaleItem, Purchase/PurchaseItem, Product, Supplier.
    - Sales pick the requested batch among in-stock batches ordered by expiry,
      decrement it and accrue one loyalty point per ₹100 of pre-redemption total.
    - Purchases merge into an existing stock row with the same product, batch and rate.
    - The chat agents only read; all writes go through the records routes.
    """,
)


NLU_AND_ROUTING = section(
    "5. NLU & Agent Routing",
    """
    - Priority: interaction (two known substances or a "X with Y" pair) >
      greeting > sales > stock > medical > customer > general.
    - Interaction vocabulary without resolvable names falls to general.
    - Confidence: 10 per substance + 25 stock, 30 greeting, 30 sales, 15 interaction,
      15 customer; floored at 60 and capped at 95.
    """,
)


EXTERNAL_LOOKUP = section(
    "6. External Lookup",
    """
    - One GET per configured source, all in parallel, each with its own timeout.
    - Pages are flattened to sentences, boilerplate is dropped and the rest is
      bucketed into interactions, side effects, dosage, warnings,
      contraindications and pregnancy.
    - Any failure yields no result for that source; agents fall back to a
      "consult your healthcare provider" notice.
    """,
)


HTTP_SURFACE = section(
    "7. HTTP Surface",
    """
    - POST /api/chatbot/chat            {message, context?}
    - POST /api/chatbot/drug-interactions {medications: [...]}
    - GET  /api/chatbot/insights
    - POST /api/chatbot/reports         {reportType: sales_summary|stock_alerts|customer_loyalty}
    - /api/stocks, /api/customers, /api/sales, /api/purchases, /api/products, /api/suppliers
    - Errors: {"success": false, "message": ...}; validation failures are 400.
    """,
)


CONFIG_ENV = section(
    "8. Configuration & Environment",
    """
    - `.env` compatible; keys: DATABASE_URL, LOG_LEVEL, CORS_ORIGINS,
      LOW_STOCK_THRESHOLD, EXPIRY_WINDOW_DAYS, HIGH_LOYALTY_POINTS,
      EXTERNAL_LOOKUP_ENABLED, EXTERNAL_LOOKUP_TIMEOUT, EXTERNAL_LOOKUP_MAX_WORKERS.
    - Sensible defaults defined in `config.py`; invalid values fail at import.
    """,
)


DATA_LIFECYCLE = section(
    "9. Data Lifecycle",
    """
    - Tables are created on startup.
    - `python -m pharmacy.data.populate_db` seeds stock once; expiry dates are
      relative to today so the demo always has items near expiry.
    - Run `POST /api/stocks/update-discounts` to persist near-expiry discounts.
    """,
)


TESTING = section(
    "10. Testing Strategy",
    """
    - unittest-style tests under `/tests`, run with pytest.
    - In-memory SQLite per test; the external lookup client is faked, so no network.
    - API tests go through FastAPI's TestClient with dependency overrides.
    """,
)


OBSERVABILITY = section(
    "11. Observability",
    """
    - Logs via `utils/logger.py` and `[WORKFLOW]` debug prints along the chat path.
    - Agent failures are logged and turned into an apology reply, never a 500.
    """,
)


TROUBLESHOOTING = section(
    "12. Troubleshooting",
    """
    - Chat always answers "general": check for greeting substrings such as "hi"
      inside other words; the greeting rule outranks sales and stock.
    - External sections empty: sources may be blocking scrapers or timing out;
      set EXTERNAL_LOOKUP_ENABLED=false to silence them.
    - Sale rejected with "Batch ... not available": the batch has no stock left.
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            BACKEND_COMPONENTS,
            DATA_AND_PERSISTENCE,
            NLU_AND_ROUTING,
            EXTERNAL_LOOKUP,
            HTTP_SURFACE,
            CONFIG_ENV,
            DATA_LIFECYCLE,
            TESTING,
            OBSERVABILITY,
            TROUBLESHOOTING,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
