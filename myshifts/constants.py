import os

CACHE_KEY_PREFIX = "shifts"
CACHE_TTL_MINUTES = int(os.environ.get("SHIFTS_CACHE_TTL_MINUTES", "5"))

# Graph returns at most this many shifts per query; truncation is not retried.
QUERY_PAGE_SIZE = int(os.environ.get("SHIFTS_QUERY_PAGE_SIZE", "500"))

DEFAULT_TIMEZONE = os.environ.get("SHIFTS_DEFAULT_TIMEZONE", "UTC")

DAYS_IN_WEEK = 7
HOURS_IN_DAY = 24.0

GRAPH_SHIFTS_PATH = "/me/joinedTeams/getShifts"
GRAPH_SHIFTS_VERSION = "beta"
GRAPH_USERS_PATH = "/users"
GRAPH_USERS_VERSION = "v1.0"

FRAGMENT_HEAD = "part1"
FRAGMENT_TAIL = "part2"

UNKNOWN_TEAM_NAME = "Unknown team"
