from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    max_marks: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    class_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
