from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text

from utils.security import hash_password, verify_password


class User(BaseModel, Base):
    __tablename__ = "users"
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    fullname = Column(String(255), nullable=False, index=True)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    # the single refresh token currently accepted for this user
    refresh_token = Column(Text, nullable=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, value: str):
        self.set_password(value)

    def set_password(self, plaintext: str) -> None:
        self.password_hash = hash_password(plaintext)

    def is_password_correct(self, plaintext: str) -> bool:
        if not plaintext or not self.password_hash:
            return False
        return verify_password(plaintext, self.password_hash)
