from pydantic import BaseModel


class SellerStatsResponse(BaseModel):
    period: str
    total_revenue: float
    seller_earnings: float
    revenue_change_pct: float
    total_sales: int
    sales_change_pct: float
    total_products: int
    active_products: int
    total_downloads: int


class RevenueBreakdown(BaseModel):
    total: float
    monthly: float
    platform_total: float
    platform_monthly: float
    sellers_total: float
    commission_pct: float


class PlatformStatsResponse(BaseModel):
    revenue: RevenueBreakdown
    orders: dict[str, int]
    products: dict[str, int]
    users: dict[str, int]


class TopProductResponse(BaseModel):
    rank: int
    resource_id: str
    title: str
    thumbnail_url: str | None = None
    price: float
    downloads: int
    revenue: float
    sales: int


class RevenuePoint(BaseModel):
    date: str
    revenue: float
    sales: int


class RevenueChartResponse(BaseModel):
    period: str
    granularity: str
    points: list[RevenuePoint]
