from __future__ import annotations

# sBTC is the fixed anchor every USD price is also expressed against.
SBTC_CONTRACT_ID = "SM3VDXK3WZZSA84XXFKAFAF15NNZX32CTSG82JFQ4.sbtc-token"

# Decimals assumed when the registry omits them.
DEFAULT_TOKEN_DECIMALS = 6

# Confidence given to an LP price derived purely from reserves.
DEFAULT_INTRINSIC_CONFIDENCE = 0.8

# Market prices below this confidence never outrank the intrinsic value.
DEFAULT_MARKET_CONFIDENCE_FLOOR = 0.5

# Upper bound on the confidence of a blended market/intrinsic price.
DEFAULT_MAX_HYBRID_CONFIDENCE = 0.95

# Absolute market-vs-intrinsic deviation (%) that counts as an arbitrage.
DEFAULT_ARBITRAGE_THRESHOLD_PCT = 5.0

# Confidence attached to prices coming from a base price oracle.
DEFAULT_BASE_PRICE_CONFIDENCE = 1.0

DEFAULT_STABLECOIN_SYMBOLS = ("USDC", "USDT", "DAI", "BUSD", "sUSDT", "sUSDC")

# Registry vault type that represents an LP token (bridges etc. are skipped).
POOL_VAULT_TYPE = "POOL"

UNRESOLVED_LEVEL = -1
