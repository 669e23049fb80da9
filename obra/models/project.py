# obra/models/project.py
import datetime as dt
from decimal import Decimal
from typing import List

from sqlalchemy import Date, DateTime, Enum, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from obra.db.base import Base
from obra.db.enums import ProjectStatus


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = {"sqlite_autoincrement": True}

    # =========
    # Identity
    # =========
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp",
    )

    # =========
    # Registration data (editable)
    # =========
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Project name")
    client: Mapped[str] = mapped_column(String(255), nullable=False, comment="Client name")
    type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Building type, e.g. residential multifamily",
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False, comment="Site address")
    built_area: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Built area in m2",
    )
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    # reference only: never used as the budget, BAC comes from the activities
    contract_value: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        comment="Contract value (reference only)",
    )

    # free-form, user-set; not derived from progress
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"),
        nullable=False,
        default=ProjectStatus.planning,
        comment="planning / in_progress / on_hold / completed",
    )

    # =========
    # Children
    # =========
    stages: Mapped[List["Stage"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Stage.display_order",
    )
    materials: Mapped[List["Material"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name}>"


from obra.models.stage import Stage  # noqa: E402,F401
from obra.models.material import Material  # noqa: E402,F401
