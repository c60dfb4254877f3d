"""Central configuration for the team pack pool."""

import os

from dotenv import load_dotenv

load_dotenv()

# Scoring: points awarded when a bundle team wins a game in each round
ROUND_NAMES = [
    "Round of 64", "Round of 32", "Sweet 16",
    "Elite 8", "Final Four", "Championship",
]
ROUND_POINTS = {
    "Round of 64": 1,
    "Round of 32": 2,
    "Sweet 16": 4,
    "Elite 8": 7,
    "Final Four": 12,
    "Championship": 20,
}

# Each scoring period covers two rounds
PERIOD_ROUNDS = {
    1: ["Round of 64", "Round of 32"],
    2: ["Sweet 16", "Elite 8"],
    3: ["Final Four", "Championship"],
}
PERIODS = sorted(PERIOD_ROUNDS)

# Upset bonus: min(loser_seed - winner_seed, UPSET_BONUS_CAP)
UPSET_BONUS_CAP = 10

# Allocation: one team per seed tier, inclusive seed ranges
SEED_TIERS = [(1, 3), (4, 6), (7, 10), (11, 16)]
MAX_TEAMS_PER_REGION = 2
MAX_ALLOCATION_ATTEMPTS = 1000
BUNDLE_SIZE = len(SEED_TIERS)

# Standings and notifications
STANDINGS_LIMIT = 10
UPSET_SPOTLIGHT_LIMIT = 5
PERIOD_PAYOUTS = [50, 25, 10]

# Bracket structure
NUM_SEEDS = 16
REGION_NAMES = ["East", "West", "South", "Midwest"]

# Standard seed matchups in round 1 (within each region)
SEED_MATCHUPS = [
    (1, 16), (8, 9), (5, 12), (4, 13),
    (6, 11), (3, 14), (7, 10), (2, 15),
]

# Environment settings
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/pool.db")

SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
FROM_EMAIL = os.getenv("FROM_EMAIL", "")
COMPANY_NAME = os.getenv("COMPANY_NAME", "March Madness")
EMAIL_LOGO_URL = os.getenv("EMAIL_LOGO_URL", "")

# Scoring period the digest jobs report on; supplied externally
CURRENT_PERIOD = int(os.getenv("CURRENT_PERIOD", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
