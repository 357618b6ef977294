"""
API schemas for the WeTransfer client.
Provides type-safe contracts for HTTP APIs.
"""

# Export commonly used schemas
from wt_sdk.schemas.common import *  # noqa: F403, F401
from wt_sdk.schemas.transfers import *  # noqa: F403, F401
from wt_sdk.schemas.boards import *  # noqa: F403, F401
