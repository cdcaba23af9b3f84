from pydantic import BaseModel
from typing import List


class DailyOrders(BaseModel):
    name: str
    date: str
    orders: int


class AnalyticsResponse(BaseModel):
    total_customers: int
    total_orders: int
    active_now: int
    chart_data: List[DailyOrders]
