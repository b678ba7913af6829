# API endpoints
from . import auth, profile, orders, dashboard, setup

__all__ = ["auth", "profile", "orders", "dashboard", "setup"]
