"""
Custom exceptions for the application.
Following SOLID principles - centralized error handling.
"""


class NotFoundError(Exception):
    """
    Exception raised when a referenced record id does not resolve.
    """

    pass


class UserNotFoundError(NotFoundError):
    """
    Exception raised when a doctor or patient id is not present in the
    user directory. Booking aborts before any write.
    """

    def __init__(self, role: str, user_id: int):
        self.role = role
        self.user_id = user_id
        super().__init__(f"{role.capitalize()} not found with ID: {user_id}")
