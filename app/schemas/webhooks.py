from pydantic import BaseModel
from typing import Optional


class WebhookResponse(BaseModel):
    success: bool = True
    message: str = "OK"
    order_count: Optional[int] = None
