"""Application constants and configuration values."""

from typing import Final

# Task log retention
LOG_BUFFER_CAPACITY: Final[int] = 100

# Cycle interval bounds (seconds)
DEFAULT_INTERVAL_SECONDS: Final[float] = 5.0
MIN_INTERVAL_SECONDS: Final[float] = 1.0

# Consecutive cycle failures before the unit of work is restarted
RESTART_FAILURE_THRESHOLD: Final[int] = 3

# Credential blobs attached to a single task
CREDENTIALS_PER_TASK: Final[int] = 1

DEFAULT_WEBSOCKET_PATH: Final[str] = "/ws"

# Time an in-flight cycle gets to finish before stop or shutdown proceed
CYCLE_GRACE_SECONDS: Final[float] = 2.0
