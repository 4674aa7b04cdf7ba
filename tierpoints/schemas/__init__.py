from tierpoints.schemas.customer import CustomerCreate, CustomerOut, PreferencesUpdate
from tierpoints.schemas.purchase import PurchaseCreate, PurchaseOut

__all__ = [
    "CustomerCreate",
    "CustomerOut",
    "PreferencesUpdate",
    "PurchaseCreate",
    "PurchaseOut",
]
