"""
Database models module.

Importing this package registers every model with Base.metadata, which
table creation and Alembic autogenerate both rely on.
"""
from fitness_gh.db.models.account import Account
from fitness_gh.db.models.refresh_token import RefreshToken
from fitness_gh.db.models.email_verification import EmailVerification
from fitness_gh.db.models.profile import UserProfile
from fitness_gh.db.models.gym import Gym
from fitness_gh.db.models.employment import Employment
from fitness_gh.db.models.subscription_plan import SubscriptionPlan
from fitness_gh.db.models.membership import Membership
from fitness_gh.db.models.payment import Payment
from fitness_gh.db.models.product import Product
from fitness_gh.db.models.order import Order, OrderItem

__all__ = [
    "Account",
    "RefreshToken",
    "EmailVerification",
    "UserProfile",
    "Gym",
    "Employment",
    "SubscriptionPlan",
    "Membership",
    "Payment",
    "Product",
    "Order",
    "OrderItem",
]
