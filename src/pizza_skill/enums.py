from enum import StrEnum


class Stage(StrEnum):
    SECRETS = "secrets"
    STORE_LOOKUP = "store_lookup"
    MENU = "menu"
    VALIDATE = "validate"
    PRICE = "price"
    PAYMENT = "payment"
    PLACE = "place"
    TRACKING = "tracking"


class Outcome(StrEnum):
    DRY_RUN = "dry_run"
    PLACED = "placed"
    NO_OPEN_STORES = "no_open_stores"
    FAILED = "failed"


class CardType(StrEnum):
    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    AMEX = "AMEX"
    DINERS = "DINERS"
    DISCOVER = "DISCOVER"
    JCB = "JCB"
    UNKNOWN = ""
