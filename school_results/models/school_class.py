from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class SchoolClass(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    session_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
