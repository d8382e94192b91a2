"""
Fulfillment manifest models

A manifest is the printable sheet the warehouse works from when a batch of
orders is picked and packed together.
"""
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class ManifestEntry(BaseModel):
    """One order on the fulfillment sheet"""

    order_id: int
    order_number: int
    customer_name: str
    customer_phone: str
    shipping_address: str = ""
    lines: List[str] = Field(default_factory=list, description="'qty x product (color/size)'")
    status: str
    total_amount: Decimal
    units: int = 0
    notes: List[str] = Field(default_factory=list, description="Operator notes trail, oldest first")


class Manifest(BaseModel):
    """A batch of orders with a grand total"""

    generated_at: datetime
    entries: List[ManifestEntry]
    grand_total: Decimal

    @property
    def order_count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["grand_total"] = float(self.grand_total)
        data["order_count"] = self.order_count
        for entry, raw in zip(self.entries, data["entries"]):
            raw["total_amount"] = float(entry.total_amount)
        return data
