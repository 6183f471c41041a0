from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.checkout")

GATEWAY_NAME = "paystack"
SUCCESS_EVENT = "charge.success"

# normalized outcome of a gateway verification
PAYMENT_SUCCESS = "success"
PAYMENT_FAILED = "failed"
PAYMENT_PENDING = "pending"

GATEWAY_FAILED_STATUSES = frozenset({"failed", "abandoned", "reversed"})
GATEWAY_PENDING_STATUSES = frozenset({"pending", "ongoing", "processing", "queued"})
