from pydantic import BaseModel
from pydantic.config import ConfigDict
from typing import Optional, Union
from datetime import datetime


# Request bodies accept missing fields so that presence checks happen in the
# service layer and come back as a 400 with a readable message.
class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LineItem(BaseModel):
    # Only the fields cart_history needs are typed; anything else the client
    # sends is kept and stored with the order
    id: int
    name: str
    quantity: int
    price: Union[int, float]

    model_config = ConfigDict(extra="allow")


class OrderRequest(BaseModel):
    username: Optional[str] = None
    items: Optional[list[LineItem]] = None
    total: Optional[Union[int, float]] = None


class LoginResponse(BaseModel):
    message: str
    username: str


class OrderPlaced(BaseModel):
    message: str
    orderId: int
    total: Union[int, float]


class OrderRead(BaseModel):
    id: int
    username: str
    items: str
    total: float
    order_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CartHistoryRead(BaseModel):
    id: int
    username: str
    item_id: int
    item_name: str
    quantity: int
    price: float
    added_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Health(BaseModel):
    status: str
    environment: str
    timestamp: str
    database: str
