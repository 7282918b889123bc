"""Default configuration constants."""

DEFAULT_MAX_RETRIES = 2
DEFAULT_RETRY_DELAY_MS = 1000

DEFAULT_CIRCUIT_BREAKER_ENABLED = False
DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_SUCCESS_THRESHOLD = 3
DEFAULT_CIRCUIT_BREAKER_TIMEOUT_MS = 60_000
