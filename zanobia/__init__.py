"""Inventory management core: units, warehouses, users, retailers, retailer batches and transactions."""

__version__ = "0.1.0"