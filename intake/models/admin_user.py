"""Admin user model for the staff who send and review invitations."""

from intake import db
from intake.models import BaseModel


class AdminUser(BaseModel):
    """
    Administrator account.

    Admins send primary invitations, review submissions and manage the
    work tracker. Passwords are stored as bcrypt hashes.
    """

    __tablename__ = "admin_users"

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(150), nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        """Convert model to dictionary."""
        data = super().to_dict()
        data.update({
            "email": self.email,
            "name": self.name,
            "is_active": self.is_active,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        })
        return data

    def __repr__(self):
        return f"<AdminUser {self.email}>"
