# obra/models/stage.py
from typing import List

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base


class Stage(Base):
    """
    Work-breakdown phase of a Project (e.g. "Fundação").
    Deleting a Stage deletes its Activities and their Daily Logs.
    """

    __tablename__ = "stages"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # ordering key inside the project; gaps are allowed
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    project: Mapped["Project"] = relationship(back_populates="stages")
    activities: Mapped[List["Activity"]] = relationship(
        back_populates="stage",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Activity.display_order",
    )

    def __repr__(self) -> str:
        return f"<Stage id={self.id} project={self.project_id} name={self.name}>"


from obra.models.project import Project  # noqa: E402,F401
from obra.models.activity import Activity  # noqa: E402,F401
