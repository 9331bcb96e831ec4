from dataclasses import dataclass

from .exceptions import ConfigurationError

PRODUCTION_HOST = "https://securegw.paytm.in"
STAGING_HOST = "https://securegw-stage.paytm.in"


@dataclass(frozen=True)
class PaytmConfig:
    """Gateway settings, built once at startup and handed to the payment code."""

    merchant_id: str
    merchant_key: str
    environment: str = "staging"
    website: str = ""
    callback_url: str = ""
    order_prefix: str = "MSH"
    timeout: float = 20.0

    @classmethod
    def from_settings(cls, conf: dict) -> "PaytmConfig":
        conf = conf or {}
        environment = str(conf.get("ENVIRONMENT") or "staging").strip().lower()
        website = conf.get("WEBSITE") or ("DEFAULT" if environment == "production" else "WEBSTAGING")
        return cls(
            merchant_id=str(conf.get("MID") or "").strip(),
            merchant_key=str(conf.get("MERCHANT_KEY") or "").strip(),
            environment=environment,
            website=website,
            callback_url=str(conf.get("CALLBACK_URL") or "").rstrip("/"),
            order_prefix=str(conf.get("ORDER_PREFIX") or "MSH"),
            timeout=float(conf.get("TIMEOUT") or 20),
        )

    @property
    def host(self) -> str:
        return PRODUCTION_HOST if self.environment == "production" else STAGING_HOST

    def callback_url_for(self, order_id: str) -> str:
        return f"{self.callback_url}?orderId={order_id}"

    def ensure_ready(self) -> None:
        if not self.merchant_id or not self.merchant_key:
            raise ConfigurationError("Paytm merchant id/key are missing")
        # AES-128/192/256 only
        if len(self.merchant_key.encode("utf-8")) not in (16, 24, 32):
            raise ConfigurationError("Paytm merchant key must be 16, 24 or 32 bytes")
        if not self.callback_url:
            raise ConfigurationError("Paytm callback URL is missing")
