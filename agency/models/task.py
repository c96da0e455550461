from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Text, JSON
from sqlalchemy.orm import relationship
from agency.db.base import Base


class Task(Base):
    """
    Content task on a client's board.

    assignees holds team member names as free text, the way the board shows
    them; it is not a foreign key to team_members.
    """
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default="medium")  # low | medium | high
    platform = Column(String(50), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    assignees = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="todo", index=True)  # todo | in-progress | review | completed
    comments_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    client = relationship("Client", back_populates="tasks")

    def __repr__(self):
        return f"<Task(id={self.id}, client_id={self.client_id}, title='{self.title}', status='{self.status}')>"
