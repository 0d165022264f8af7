"""Admin principal used by Flask-Login for the management screens."""

from flask_login import UserMixin


class AdminUser(UserMixin):
    """The single passcode-protected administrator.

    There are no learner accounts; only the admin panel is authenticated, so
    the user is not stored in the database.
    """

    ADMIN_ID = 'admin'

    def __init__(self, user_id: str = ADMIN_ID):
        self.id = user_id

    @classmethod
    def load(cls, user_id: str):
        if user_id == cls.ADMIN_ID:
            return cls(user_id)
        return None
