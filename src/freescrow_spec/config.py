"""Freescrow Python spec configuration constants.

Keep this file aligned with the constants of the Freescrow escrow and factory
contracts and of the centralized arbitrator used on development networks.
"""

# Time
ONE_DAY = 24 * 3600
MAX_AUCTION_DURATION = 30 * ONE_DAY
MAX_VERIFY_PERIOD = 2 * ONE_DAY

# Units
COIN_DECIMALS = 18
COIN_VALUE = 10**COIN_DECIMALS

# Arbitration
NUMBER_OF_CHOICES = 2  # favor-client, favor-freelancer (0 = refused to arbitrate)
DEFAULT_ARBITRATION_COST = COIN_VALUE // 10  # 0.1 coin, matches the dev arbitrator
DEFAULT_FEE_DEPOSIT_PERIOD = 7 * ONE_DAY

# Addresses
ADDRESS_SIZE = 32
ZERO_ADDRESS = bytes(ADDRESS_SIZE)
FACTORY_ADDRESS = bytes([0xFA]) * ADDRESS_SIZE

# Metadata limits
MAX_TITLE_LEN = 256
MAX_DESCRIPTION_LEN = 4096
MAX_EXTRA_DATA_LEN = 1024
MAX_EVIDENCE_LEN = 2048
