"""Sales Agent: today's takings or a recent-transactions summary."""
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .base_agent import BaseAgent, fmt_money
from ..data.models import Sale
from ..schemas.io_models import AgentResult, ClassificationResult

RECENT_LIMIT = 10


class SalesAgent(BaseAgent):
    name = "sales"
    error_message = "Sorry, I encountered an error while retrieving sales information."

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing SalesAgent...")
        db = self.session_factory()
        try:
            recent = db.query(Sale).order_by(Sale.created_at.desc()).limit(RECENT_LIMIT).all()
            text = "**Sales Information**\n\n"

            if "today" in query.lower():
                today = date.today()
                todays = [s for s in recent if s.created_at and s.created_at.date() == today]
                revenue = sum(s.total_amount or 0 for s in todays)
                text += "**Today's Sales:**\n"
                text += f"• Total Sales: {len(todays)}\n"
                text += f"• Revenue: {fmt_money(revenue)}\n"
                return self._ok(text, branch="today", count=len(todays), revenue=revenue)

            revenue = sum(s.total_amount or 0 for s in recent)
            text += "**Recent Sales Overview:**\n"
            text += f"• Recent Sales: {len(recent)}\n"
            text += f"• Total Revenue: {fmt_money(revenue)}\n\n"
            text += "**Recent Transactions:**\n"
            for sale in recent:
                customer = sale.customer_name or "Unknown Customer"
                text += f"• Invoice {sale.invoice_number}: {fmt_money(sale.total_amount)} ({customer})\n"
            return self._ok(text, branch="recent", count=len(recent), revenue=revenue)
        except SQLAlchemyError as e:
            return self._failed(e)
        finally:
            db.close()
