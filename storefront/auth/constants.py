from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.auth")

SPECIALS = set("!@#$%^&*()-_=+[]{};:'\",.<>/?\\|`~")

MIN_PASSWORD_LENGTH = 8
