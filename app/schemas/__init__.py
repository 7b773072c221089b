from app.schemas.pricing import (
    FeatureConfig,
    PriceTable,
    QuoteConfig,
    QuoteTotals,
    LineItem,
)
from app.schemas.auth import (
    AuthUser,
    SessionInfo,
    LoginRequest,
    LoginResponse,
)
