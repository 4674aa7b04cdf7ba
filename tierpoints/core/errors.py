class LoyaltyError(Exception):
    """Base class for every failure raised by the loyalty engine."""


class InvalidAmount(LoyaltyError, ValueError):
    """Purchase amount is zero, negative, non-finite or not a number."""


class InvalidTier(LoyaltyError, ValueError):
    """Value outside the closed tier set."""


class InvalidPoints(LoyaltyError, ValueError):
    """Cumulative points are negative or not an integer."""


class CustomerNotFound(LoyaltyError, LookupError):
    def __init__(self, customer_id: int) -> None:
        super().__init__("Customer not found")
        self.customer_id = customer_id


class DuplicateCustomer(LoyaltyError, ValueError):
    def __init__(self, customer_id: int) -> None:
        super().__init__(f"Customer {customer_id} already exists")
        self.customer_id = customer_id
