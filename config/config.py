import os

ZERO_ADDRESS = "0x" + "0" * 40
ADDRESS_HEX_LENGTH = 40

POLICY_CACHED = "cached"
POLICY_LIVE = "live"
POLICIES = (POLICY_CACHED, POLICY_LIVE)

REGISTRY_POLICY = os.environ.get("TOKEN_REGISTRY_POLICY", POLICY_CACHED)
DEFAULT_MAX_ITERATIONS = int(os.environ.get("TOKEN_REGISTRY_MAX_ITERATIONS", "100"))
EVENT_HISTORY_SIZE = int(os.environ.get("TOKEN_REGISTRY_EVENT_HISTORY", "10000"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE") or None
LOG_STRUCTURED = os.environ.get("LOG_STRUCTURED", "1").lower() in ("1", "true", "yes", "on")
