"""Stock Agent: product locations, top sellers, stock alerts and inventory overview.

Branch order matters: a location question wins over a top-sellers question,
which wins over an alerts question; anything else gets the overview.
"""
import re
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base_agent import BaseAgent, fmt_date, fmt_money
from ..app.config import Config
from ..data.models import Sale, Stock
from ..nlu import rules
from ..schemas.io_models import AgentResult, ClassificationResult
from ..utils.logger import get_logger

logger = get_logger("agents")

LOCATION_NOISE = re.compile(r"location of|where is|find|locate|rack|shelf|number of", re.IGNORECASE)
SAMPLE_SIZE = 10
TOP_N = 5
SALES_WINDOW = 100


def low_stock_query(db: Session):
    return db.query(Stock).filter(Stock.quantity < Config.LOW_STOCK_THRESHOLD)

def expiring_query(db: Session, now: Optional[datetime] = None):
    now = now or datetime.now()
    horizon = now + timedelta(days=Config.EXPIRY_WINDOW_DAYS)
    return db.query(Stock).filter(Stock.expiry_date >= now, Stock.expiry_date <= horizon)


def location_target(query: str) -> str:
    """Strip location vocabulary from a message, leaving the product name."""
    return LOCATION_NOISE.sub("", query.lower()).strip().strip("?.!").strip()


def aggregate_sales(sales: List[Sale]) -> List[Dict]:
    totals: Dict[str, Dict] = defaultdict(lambda: {"total_quantity": 0, "total_revenue": 0.0, "sale_count": 0})
    for sale in sales:
        for item in sale.items:
            row = totals[item.product_name]
            row["total_quantity"] += item.quantity or 0
            row["total_revenue"] += item.total or 0
            row["sale_count"] += 1
    ranked = [{"product_name": name, **data} for name, data in totals.items()]
    return sorted(ranked, key=lambda r: r["total_quantity"], reverse=True)


class StockAgent(BaseAgent):
    name = "stock"
    error_message = "**Error retrieving stock information.** Please try again."

    def handle(self, query: str, analysis: Optional[ClassificationResult] = None) -> AgentResult:
        print(f"[WORKFLOW] Executing StockAgent...")
        db = self.session_factory()
        try:
            q = query.lower()
            if rules.matched_keywords(q, rules.LOCATION):
                return self._location(db, query)
            if rules.matched_keywords(q, rules.TOP_SELLING):
                return self._top_sellers(db)
            if rules.matched_keywords(q, rules.STOCK_ALERTS):
                return self._alerts(db)
            return self._overview(db)
        except SQLAlchemyError as e:
            return self._failed(e)
        finally:
            db.close()

    def _location(self, db: Session, query: str) -> AgentResult:
        target = location_target(query)
        items = db.query(Stock).order_by(Stock.id).all()
        match = None
        if target:
            match = next((s for s in items
                          if target in s.product_name.lower() or s.product_name.lower() in target), None)

        text = "**Stock Information**\n\n"
        if match is None:
            text += "**Product Not Found**\n\n"
            text += f'I couldn\'t find "{target}" in our inventory.\n'
            text += "Please check the spelling or try a different product name.\n\n"
            text += "**Available Products:**\n"
            text += "".join(f"• {s.product_name}\n" for s in items[:TOP_N])
            return self._ok(text, branch="location", found=False, target=target)

        text += "**Product Location Information**\n\n"
        text += f"**{match.product_name}:**\n"
        text += f"• **Rack:** {match.rack_number}\n"
        text += f"• **Shelf:** {match.shelf_number}\n"
        text += f"• **Quantity:** {match.quantity} units\n"
        text += f"• **Price:** {fmt_money(match.mrp)}\n"
        if match.expiry_date:
            text += f"• **Expiry:** {fmt_date(match.expiry_date)}\n"
        text += "\n**Note:** This is the current location and stock level.\n"
        return self._ok(text, branch="location", found=True, product=match.product_name)

    def _top_sellers(self, db: Session) -> AgentResult:
        text = "**Stock Information**\n\n"
        try:
            recent = db.query(Sale).order_by(Sale.date.desc()).limit(SALES_WINDOW).all()
            ranked = aggregate_sales(recent)
        except SQLAlchemyError as e:
            logger.warning(f"[STOCK] Sales history unavailable, ranking by stock: {e}")
            db.rollback()
            return self._ok(text + self._by_quantity(db, "(Based on current stock levels)",
                                                     "This is based on current stock levels. "
                                                     "For actual sales data, check the Sales Report."),
                            branch="top_selling", source="stock")

        if not ranked:
            return self._ok(text + self._by_quantity(db, "(Based on current stock levels - no sales data available)",
                                                     "No sales data available. Showing current stock levels instead."),
                            branch="top_selling", source="stock")

        text += "**Most Sold Products:**\n(Based on actual sales data)\n\n"
        for idx, row in enumerate(ranked[:TOP_N], 1):
            text += f"{idx}. **{row['product_name']}**\n"
            text += f"   • Total Sold: {row['total_quantity']} units\n"
            text += f"   • Revenue: {fmt_money(row['total_revenue'])}\n"
            text += f"   • Sale Count: {row['sale_count']} transactions\n\n"
        text += "**Note:** This is based on actual sales transactions.\n"
        return self._ok(text, branch="top_selling", source="sales",
                        top=[r["product_name"] for r in ranked[:TOP_N]])

    def _by_quantity(self, db: Session, label: str, note: str) -> str:
        items = db.query(Stock).order_by(Stock.quantity.desc()).limit(SAMPLE_SIZE).all()
        text = f"**Most Popular Products:**\n{label}\n\n"
        for idx, item in enumerate(items[:TOP_N], 1):
            text += f"{idx}. **{item.product_name}**\n"
            text += f"   • Quantity: {item.quantity} units\n"
            text += f"   • Location: Rack {item.rack_number}, Shelf {item.shelf_number}\n"
            text += f"   • Price: {fmt_money(item.mrp)}\n\n"
        return text + f"**Note:** {note}\n"

    def _alerts(self, db: Session) -> AgentResult:
        low = low_stock_query(db).all()
        expiring = expiring_query(db).all()
        text = "**Stock Information**\n\n**Stock Alerts**\n\n"
        if low:
            text += f"**Low Stock Items ({len(low)}):**\n"
            for item in low:
                text += f"• {item.product_name}: {item.quantity} units remaining\n"
                text += f"  Location: Rack {item.rack_number}, Shelf {item.shelf_number}\n\n"
        if expiring:
            text += f"**Expiring Soon ({len(expiring)}):**\n"
            for item in expiring:
                text += f"• {item.product_name}: Expires {fmt_date(item.expiry_date)}\n"
                text += f"  Location: Rack {item.rack_number}, Shelf {item.shelf_number}\n\n"
        if not low and not expiring:
            text += "**All items are well-stocked and not expiring soon.**\n"
        return self._ok(text, branch="alerts",
                        low_stock=[s.product_name for s in low],
                        expiring=[s.product_name for s in expiring])

    def _overview(self, db: Session) -> AgentResult:
        total = db.query(Stock).count()
        low_count = low_stock_query(db).count()
        expiring_count = expiring_query(db).count()
        recent = db.query(Stock).order_by(Stock.id.desc()).limit(TOP_N).all()

        text = "**Stock Information**\n\n**Current Stock Overview:**\n"
        text += f"• Total Items: {total}\n"
        text += f"• Low Stock Items: {low_count}\n"
        text += f"• Expiring Soon: {expiring_count}\n\n"
        text += "**Recent Stock Items:**\n"
        text += "".join(f"• {s.product_name}: {s.quantity} units (Rack {s.rack_number})\n" for s in recent)
        if total > TOP_N:
            text += '\n**Tip:** Use "location of [product name]" to find specific items.\n'
        return self._ok(text, branch="overview", total=total, low_stock=low_count, expiring=expiring_count)
