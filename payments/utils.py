import secrets
import time


def generate_order_id(prefix="MSH"):
    # e.g., MSH-1718000000000-4821; millisecond clock plus a random tail, no storage check
    millis = time.time_ns() // 1_000_000
    return f"{prefix}-{millis}-{secrets.randbelow(10_000)}"
