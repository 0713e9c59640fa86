from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from school_results.core.database import Base

class Setting(Base):
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    key: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    value: Mapped[str] = mapped_column(String, nullable=False)
