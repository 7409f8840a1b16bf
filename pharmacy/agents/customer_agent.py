"""Customer Agent: loyalty leaderboard and customer overview."""
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .base_agent import BaseAgent
from ..app.config import Config
from ..data.models import Customer
from ..nlu import rules
from ..schemas.io_models import AgentResult, ClassificationResult

TOP_N = 5
LEADERBOARD_SIZE = 10


class CustomerAgent(BaseAgent):
    name = "customer"
    error_message = "Sorry, I encountered an error while retrieving customer information."

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing CustomerAgent...")
        db = self.session_factory()
        try:
            ranked = (db.query(Customer)
                      .order_by(Customer.loyalty_points.desc())
                      .limit(LEADERBOARD_SIZE).all())
            high = [c for c in ranked if c.loyalty_points >= Config.HIGH_LOYALTY_POINTS]

            text = "**Customer Information**\n\n"
            if rules.matched_keywords(query, rules.LOYALTY_BOARD):
                text += f"**High Loyalty Customers ({len(high)}):**\n"
                for c in high:
                    text += f"• {c.customer_name or 'Unknown'}: {c.loyalty_points} points ({c.customer_contact or 'N/A'})\n"
                return self._ok(text, branch="leaderboard", customers=[c.customer_name for c in high])

            total = db.query(Customer).count()
            high_count = (db.query(Customer)
                          .filter(Customer.loyalty_points >= Config.HIGH_LOYALTY_POINTS).count())
            text += "**Customer Overview:**\n"
            text += f"• Total Customers: {total}\n"
            text += f"• High Loyalty: {high_count}\n\n"
            text += "**Top Customers:**\n"
            for c in ranked[:TOP_N]:
                text += f"• {c.customer_name or 'Unknown'}: {c.loyalty_points} points\n"
            return self._ok(text, branch="overview", total=total, high_loyalty=high_count)
        except SQLAlchemyError as e:
            return self._failed(e)
        finally:
            db.close()
