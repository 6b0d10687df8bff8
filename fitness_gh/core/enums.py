"""
String enums shared by models, schemas and services.

Values are stored as plain strings in the database.
"""
from enum import Enum


class UserType(str, Enum):
    MEMBER = "MEMBER"
    EMPLOYEE = "EMPLOYEE"
    GYM_OWNER = "GYM_OWNER"
    SUPER_ADMIN = "SUPER_ADMIN"


class EmployeeRole(str, Enum):
    MANAGER = "MANAGER"
    TRAINER = "TRAINER"
    RECEPTIONIST = "RECEPTIONIST"
    STAFF = "STAFF"


class DurationUnit(str, Enum):
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"
    YEARS = "YEARS"


class MembershipStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentChannel(str, Enum):
    MOBILE_MONEY = "mobile_money"
    CARD = "card"


class ProductStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    OUT_OF_STOCK = "OUT_OF_STOCK"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Memberships in these states block a second one for the same profile, gym and plan
OPEN_MEMBERSHIP_STATUSES = (MembershipStatus.PENDING.value, MembershipStatus.ACTIVE.value)

PAYMENT_PROVIDER = "SIMULATOR"
