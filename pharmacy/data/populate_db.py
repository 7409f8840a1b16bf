import csv
import os
from datetime import datetime, timedelta

from .database import SessionLocal, create_tables
from .models import Stock, StockCategory
from ..utils.logger import get_logger

logger = get_logger("db")

STOCK_CSV_PATH = os.path.join(os.path.dirname(__file__), "raw", "stock.csv")

def populate_stock(session_factory=None, csv_path=STOCK_CSV_PATH):
    """Read stock.csv and populate the stock table. Returns the number of rows added."""
    db = (session_factory or SessionLocal)()
    try:
        if db.query(Stock).count() > 0:
            logger.info("Stock table is not empty. Skipping population.")
            return 0

        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        added = 0
        with open(csv_path, mode='r', encoding='utf-8') as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                db.add(Stock(
                    product_name=row['product_name'],
                    generic_name=row['generic_name'],
                    category=StockCategory(row['category']),
                    batch_id=row['batch_id'],
                    mrp=float(row['mrp']),
                    rate=float(row['rate']),
                    gst=float(row['gst']),
                    packing=row['packing'],
                    quantity=int(row['quantity']),
                    # relative so the demo always has a few items near expiry
                    expiry_date=today + timedelta(days=int(row['expiry_in_days'])),
                    supplier_name=row['supplier_name'],
                    rack_number=row['rack_number'],
                    shelf_number=row['shelf_number'],
                ))
                added += 1

        db.commit()
        logger.info(f"Successfully populated the stock table with {added} rows.")
        return added
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_tables()
    populate_stock()
