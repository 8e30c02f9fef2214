from sqlalchemy import Column, Integer, String, DateTime, func
from backend.app.database import Base
from pydantic import BaseModel
from typing import Optional

# Solo lectura desde el motor de informes: el alta y la autenticación
# viven en otro servicio.
class UsuarioDB(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    currency = Column(String(3), nullable=False, default="EUR")
    created_at = Column(DateTime, nullable=False, server_default=func.now())

class Usuario(BaseModel):
    id: int
    email: Optional[str] = None
    name: Optional[str] = None
    currency: str = "EUR"

    class Config:
        from_attributes = True
        frozen = True
