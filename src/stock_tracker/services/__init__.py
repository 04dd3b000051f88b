"""
Service layer for Stock Tracker.

- inventory_store: observable product catalog
- persistence: storage backends for the catalog
- report_service: stock value report and CSV export
- database: SQLAlchemy engine and sessions
"""
