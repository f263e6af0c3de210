from typing import Optional
from pydantic import BaseModel


class GatewayCallback(BaseModel):
    application_id: int
    reference: str
    amount: Optional[int] = None
    status: str
    signature: Optional[str] = None
