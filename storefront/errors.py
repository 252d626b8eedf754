"""
Common Errors

Message constants shared by the cart, checkout and auth layers, and the
exception taxonomy raised to callers.
"""

# Auth errors
ERROR_NOT_AUTHENTICATED = "Must be logged in to modify the cart"
ERROR_INVALID_CREDENTIALS = "Invalid email or password"

# Cart errors
ERROR_INVALID_QUANTITY = "quantity must be a positive integer"
ERROR_CART_EMPTY = "Cart is empty"

# Remote store errors
ERROR_REMOTE_READ = "Could not load data, please try again"
ERROR_REMOTE_WRITE = "Could not save changes, please try again"

# Checkout errors
ERROR_CHECKOUT_FAILED = "Failed to place order"
ERROR_CART_NOT_CLEARED = "Order placed, but the cart could not be emptied"

# PostgREST error code for unique_violation
PG_UNIQUE_VIOLATION = "23505"


class StorefrontError(Exception):
    """Base class for errors surfaced to the presentation layer."""

    default_message = "Storefront error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NotAuthenticated(StorefrontError):
    """Mutating cart operation attempted with no current identity."""

    default_message = ERROR_NOT_AUTHENTICATED


class AuthenticationFailed(StorefrontError):
    """Sign-in or sign-up rejected by the auth service."""

    default_message = ERROR_INVALID_CREDENTIALS


class RemoteReadFailed(StorefrontError):
    """A fetch failed. Local state is left as it was."""

    default_message = ERROR_REMOTE_READ

    def __init__(self, message: str | None = None, table: str | None = None) -> None:
        super().__init__(message)
        self.table = table


class RemoteWriteFailed(StorefrontError):
    """The backing table rejected or could not complete a write."""

    default_message = ERROR_REMOTE_WRITE

    def __init__(
        self,
        message: str | None = None,
        table: str | None = None,
        code: str | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.table = table
        self.code = code
        # Reason reported by the store, shown to the user on checkout failure
        self.detail = detail

    @property
    def is_conflict(self) -> bool:
        return self.code == PG_UNIQUE_VIOLATION


class EmptyCart(StorefrontError):
    default_message = ERROR_CART_EMPTY


class CheckoutFailed(StorefrontError):
    """Checkout aborted at `step`. The cart was not cleared."""

    default_message = ERROR_CHECKOUT_FAILED

    def __init__(self, step: str, reason: str | None = None) -> None:
        message = f"{ERROR_CHECKOUT_FAILED}: {reason}" if reason else ERROR_CHECKOUT_FAILED
        super().__init__(message)
        self.step = step


class CartNotCleared(StorefrontError):
    """
    The order was placed but emptying the cart failed.

    `order` is the placed order. Retry `CartManager.clear()` alone; placing
    the order again would duplicate it.
    """

    default_message = ERROR_CART_NOT_CLEARED

    def __init__(self, order, reason: str | None = None) -> None:
        super().__init__(f"{ERROR_CART_NOT_CLEARED}: {reason}" if reason else None)
        self.order = order
