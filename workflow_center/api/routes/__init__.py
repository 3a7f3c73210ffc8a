"""
API Routes Package
"""
from . import (
    health,
    workflows,
    execution,
)
