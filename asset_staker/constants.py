APP_LOCAL_INTS = 3
APP_LOCAL_BYTES = 0
APP_GLOBAL_INTS = 8
APP_GLOBAL_BYTES = 0
MAX_UINT64 = 18446744073709551615

ALGO_ASSET_ID = 0
MIN_TXN_FEE = 1_000

# seed payment = base + one opt-in per distinct asset
BOOTSTRAP_BASE_AMOUNT = 1_000
ASSET_OPT_IN_AMOUNT = 1_000

STAKE_ASSET_KEY = b"sa"
REWARD_ASSET_KEY = b"ra"
REWARD_RATE_KEY = b"rr"
TOTAL_REWARDS_KEY = b"tr"
TOTAL_STAKED_KEY = b"ts"
START_TIMESTAMP_KEY = b"st"
FINISH_TIMESTAMP_KEY = b"fi"
LAST_UPDATED_KEY = b"lu"

USER_STAKE_KEY = b"us"
USER_PENDING_REWARDS_KEY = b"up"
USER_LAST_UPDATED_KEY = b"ul"
