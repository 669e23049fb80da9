# seed_demo.py
"""
Populate the database with the demo project "Residencial Villa Verde"
(6 stages x 3 activities). Does nothing when a project already exists.
"""
import os

from dotenv import load_dotenv

from obra.db.auto_init import auto_init
from obra.db.session import Database

load_dotenv()


def main():
    base_dir = os.path.abspath(os.path.dirname(__file__))
    db_url = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(base_dir, 'obra.db')}")

    database = Database(db_url)
    try:
        auto_init(database, seed_demo=True)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
