from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class Counter(Base):
    """Last id handed out for one entity collection."""
    __tablename__ = "counters"

    name: Mapped[str] = mapped_column(String, primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
