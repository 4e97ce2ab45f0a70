"""
Application Constants

Centralized constants for the decision engine, price handling and status views.
"""

from decimal import Decimal

# Rolling price history kept per symbol (oldest sample evicted beyond this)
MAX_HISTORY_SIZE = 200

# Fraction digits for indicator values and order quantities
PRICE_SCALE = 8
PRICE_QUANTUM = Decimal("0.00000001")

# Number of most recent samples exposed in the status view
RECENT_PRICES_WINDOW = 10

# Signal classifications shown in the status view
STATUS_INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
STATUS_BULLISH = "BULLISH"
STATUS_BEARISH = "BEARISH"
STATUS_NONE = "NONE"

# Binance endpoints
BINANCE_BASE_URL = "https://api.binance.com"
BINANCE_STREAM_URL = "wss://stream.binance.com:9443"
BINANCE_TESTNET_BASE_URL = "https://testnet.binance.vision"
BINANCE_TESTNET_STREAM_URL = "wss://stream.testnet.binance.vision"

# Seconds to wait before reconnecting a dropped market data stream
STREAM_RECONNECT_DELAY_SECONDS = 5.0

# Inbound messages buffered per stream worker (only the latest value matters)
STREAM_QUEUE_SIZE = 100
