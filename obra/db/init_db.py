def import_models():
    """Register every table on Base.metadata before create_all/drop_all."""
    from obra.models import (  # noqa: F401
        project,
        stage,
        activity,
        daily_log,
        material,
        purchase,
        warehouse_exit,
        warehouse_waste,
    )
