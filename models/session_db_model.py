from sqlalchemy import Column, Integer, String, JSON
from database import Base

class SessionDB(Base):
    __tablename__ = "sessions"

    session_id = Column(String, primary_key=True, index=True)
    file_name = Column(String, index=True)
    file_path = Column(String)
    sheet_name = Column(String)
    n_rows = Column(Integer)
    n_cols = Column(Integer)
    meta = Column(JSON, default=dict)
