"""
Create any missing tables (users, cv_files) without touching existing data.
Usage: python -m cv_backend.scripts.ensure_tables
"""
from cv_backend.database import ensure_tables_exist


def main():
    ensure_tables_exist()
    print("DB table check complete: created only missing tables.")


if __name__ == "__main__":
    main()
