from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class Mark(Base):
    __tablename__ = "marks"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    student_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    subject_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    obtained: Mapped[str] = mapped_column(String, nullable=False, default="0")
