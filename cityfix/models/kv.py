from sqlalchemy import Column, String, JSON, TIMESTAMP, func

from cityfix.database import Base


class KVEntry(Base):
    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
