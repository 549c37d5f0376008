from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, func

from cityfix.database import Base


class StorageBucket(Base):
    __tablename__ = "storage_buckets"

    name = Column(String(100), primary_key=True)
    public = Column(Boolean, default=False, nullable=False)
    file_size_limit = Column(Integer, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
