"""
Payment & Expense Value Objects
"""
from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class ExpenseCategory(str, Enum):
    SUPPLIES = "supplies"
    UTILITIES = "utilities"
    MAINTENANCE = "maintenance"
    EQUIPMENT = "equipment"
    MARKETING = "marketing"
    ADMINISTRATIVE = "administrative"
    INSURANCE = "insurance"
    OTHER = "other"
