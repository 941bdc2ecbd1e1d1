from enum import Enum


class RecurrenceInterval(str, Enum):
    once = "once"
    weekly = "weekly"
    biweekly = "biweekly"
    monthly = "monthly"
    semiannually = "semiannually"


class LedgerEntryKind(str, Enum):
    debt = "debt"
    settlement = "settlement"
