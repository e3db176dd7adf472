from sqlalchemy import JSON, Column, String

from database.database import Base


class Document(Base):
    __tablename__ = "documents"

    collection = Column(String, primary_key=True, nullable=False)
    doc_id = Column(String, primary_key=True, nullable=False, index=True)
    data = Column(JSON, nullable=False)
    time_created = Column(String, nullable=True)
    time_updated = Column(String, nullable=True)

    def as_dict(self) -> dict:
        return {"id": self.doc_id, **(self.data or {})}
