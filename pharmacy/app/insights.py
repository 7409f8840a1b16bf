"""Dashboard aggregates and canned reports for the chatbot endpoints."""
from collections import defaultdict
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from .config import Config
from ..agents.stock_agent import expiring_query, low_stock_query
from ..data.models import Customer, Sale, Stock
from ..schemas.record_models import CustomerOut, StockOut

INSIGHT_SAMPLE = 5
SUMMARY_DAYS = 7
LOYALTY_REPORT_SIZE = 10


class UnknownReportType(ValueError):
    pass


def system_insights(db: Session) -> Dict[str, int]:
    """Headline counts; low-stock, expiring and recent-sales figures are capped samples."""
    return {
        "totalStock": db.query(Stock).count(),
        "lowStockItems": len(low_stock_query(db).limit(INSIGHT_SAMPLE).all()),
        "expiringItems": len(expiring_query(db).limit(INSIGHT_SAMPLE).all()),
        "totalCustomers": db.query(Customer).count(),
        "totalSales": db.query(Sale).count(),
        "recentSales": len(db.query(Sale).order_by(Sale.created_at.desc()).limit(INSIGHT_SAMPLE).all()),
    }


def sales_summary(db: Session) -> Dict[str, Any]:
    """Per-day totals for the most recent days that have sales."""
    days: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"totalSales": 0.0, "count": 0})
    for created_at, amount in db.query(Sale.created_at, Sale.total_amount).all():
        bucket = days[created_at.strftime("%Y-%m-%d")]
        bucket["totalSales"] += amount or 0
        bucket["count"] += 1
    latest = sorted(days, reverse=True)[:SUMMARY_DAYS]
    return {"salesData": [{"_id": d, "totalSales": round(days[d]["totalSales"], 2), "count": days[d]["count"]}
                          for d in latest]}


def stock_alerts(db: Session) -> Dict[str, Any]:
    low_ids = {s.id for s in low_stock_query(db).all()}
    expiring_ids = {s.id for s in expiring_query(db).all()}
    rows = (db.query(Stock).filter(Stock.id.in_(low_ids | expiring_ids)).order_by(Stock.id).all()
            if low_ids or expiring_ids else [])
    return {"alerts": [StockOut.model_validate(s).model_dump(by_alias=True, mode="json") for s in rows]}


def customer_loyalty(db: Session) -> Dict[str, Any]:
    rows = (db.query(Customer)
            .filter(Customer.loyalty_points >= Config.HIGH_LOYALTY_POINTS)
            .order_by(Customer.loyalty_points.desc())
            .limit(LOYALTY_REPORT_SIZE)
            .all())
    return {"loyaltyData": [CustomerOut.model_validate(c).model_dump(by_alias=True, mode="json") for c in rows]}


REPORT_BUILDERS = {
    "sales_summary": sales_summary,
    "stock_alerts": stock_alerts,
    "customer_loyalty": customer_loyalty,
}


def generate_report(db: Session, report_type: Optional[str]) -> Dict[str, Any]:
    builder = REPORT_BUILDERS.get(report_type or "")
    if builder is None:
        raise UnknownReportType(report_type)
    return builder(db)
