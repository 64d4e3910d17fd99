"""SQLAlchemy database models."""
from dotenv import load_dotenv
from app.models.base import Base
from app.models.credit import CreditAccount, CreditTransaction


load_dotenv()

__all__ = [
    "Base",
    "CreditAccount",
    "CreditTransaction",
]
