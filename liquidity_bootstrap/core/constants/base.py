GAS_BUFFER_MULTIPLIER = 1.1
SUGGESTED_PRIORITY_FEE_MULTIPLIER = 1.5
SUGGESTED_GAS_PRICE_MULTIPLIER = 1.5
MAX_BASE_FEE_GROWTH_MULTIPLIER = 2

# Timeout constants (seconds)
# Testnet RPCs can be slow to index receipts; callers that need an unbounded
# wait pass receipt_timeout=None to the client instead.
DEFAULT_TRANSACTION_TIMEOUT = 180
DEFAULT_POLL_INTERVAL = 0.5

# Grace window added to "now" for the mint deadline.
DEFAULT_DEADLINE_SECONDS = 600

TOKEN_DECIMALS = 18
