# oracle/config.py
# Configuration for the oracle (ISAAC64 stream service)

# Network config
HOST = '127.0.0.1'
PORT = 5000

# Seed configuration:
# - SEED_MODE:
#     'fixed'  : use the integer in SEED (if SEED is None, falls back to DEFAULT_SEED)
#     'random' : use os.urandom(8) at startup (non-deterministic each run)
#     'time'   : use current unix time as seed - low entropy (for demo)
SEED_MODE = 'fixed'   # 'fixed' | 'random' | 'time'

# If SEED_MODE == 'fixed', use this SEED (64-bit integer; wider values are masked).
SEED = 0x0123456789ABCDEF  # or None

# Used when SEED is None or SEED_MODE is unknown.
DEFAULT_SEED = 0

# If SEED_MODE == 'time', this controls whether we use seconds or milliseconds.
# 's' -> int(time.time()), 'ms' -> int(time.time() * 1000)
TIME_GRANULARITY = 's'  # 's' or 'ms'

# How many bits of each 64-bit word the oracle reveals on /get_output (1..64)
OUTPUT_BITS = 64
OUTPUT_SELECT = 'high'   # 'high' or 'low'

# Logging level
LOG_LEVEL = 'INFO'
