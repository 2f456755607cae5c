from sqlalchemy import Column, String, Boolean
from core.database import BaseModel, CHAR_LENGTH


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = {'extend_existing': True}

    email = Column(String(CHAR_LENGTH), unique=True,
                   index=True, nullable=False)
    firstname = Column(String(CHAR_LENGTH), nullable=False)
    lastname = Column(String(CHAR_LENGTH), nullable=False)
    role = Column(String(50), default="Customer")  # Customer, Supplier, Admin
    active = Column(Boolean, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.firstname} {self.lastname}"

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"
