from sqlalchemy import Column, Integer, String, Text
from services.db import Base
from services.identity import new_identity

class User(Base):
    __tablename__ = "users"

    # Internal key keeps insertion order; `id` is the public identity token
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(24), unique=True, nullable=False, index=True, default=new_identity)

    # Profile information
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    location = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    occupation = Column(String(200), nullable=True)

    def __repr__(self):
        return f"<User(id='{self.id}', name='{self.first_name} {self.last_name}')>"
