# run.py
"""
run.py
Development launcher for the Flask JSON API (local / intranet use).
"""
import os
import sys

from obra.app_factory import create_app, get_database
from obra.db.auto_init import auto_init


def get_app_base_dir():
    """
    Program root directory
    - source checkout: directory of run.py
    - frozen build: directory of the executable
    """
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    return os.path.abspath(os.path.dirname(__file__))


def configure_database():
    """
    Default the database to obra.db in the program root unless DATABASE_URL is set.
    """
    if os.getenv("DATABASE_URL"):
        return
    db_path = os.path.join(get_app_base_dir(), "obra.db")
    os.environ["DATABASE_URL"] = f"sqlite:///{db_path}"


def main():
    # 0️⃣ database location
    configure_database()

    # 1️⃣ create the Flask app (owns the Database handle)
    app = create_app()

    # 2️⃣ create missing tables before serving
    auto_init(get_database(app), seed_demo=os.getenv("SEED_DEMO", "0") == "1")

    print("DB URL:", app.config["DATABASE_URL"])

    # 3️⃣ server parameters
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 5000))
    debug = os.getenv("FLASK_DEBUG", "0") == "1"

    # 4️⃣ serve
    app.run(host=host, port=port, debug=debug, use_reloader=False)


if __name__ == "__main__":
    main()
