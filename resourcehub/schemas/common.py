from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    resources_count: int
    orders_count: int
