from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class Student(Base):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    roll_no: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    class_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
