# obra/db/enums.py
import enum

# Project related enums
class ProjectStatus(enum.Enum):
    planning = "planning"
    in_progress = "in_progress"
    on_hold = "on_hold"
    completed = "completed"


# Warehouse movement kinds, used when reporting stock movements
class StockMovementType(enum.Enum):
    PURCHASE = "purchase"
    EXIT = "exit"
    WASTE = "waste"
