import argparse
import csv
import logging

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from services import class_service, student_service
from services.errors import AppError

logger = logging.getLogger(__name__)

CSV_PATH = "data/students.csv"  # ✅ default file path (columns: name, nis)


def import_students(class_id: int, csv_path: str = CSV_PATH, db: Session = None) -> dict:
    """Add every CSV row to the class roster; rows with a taken NIS or no name are skipped."""
    owns_session = db is None
    db = db or SessionLocal()
    added, skipped = 0, 0
    try:
        class_service.get_class(db, class_id)
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for line_no, row in enumerate(reader, start=2):
                try:
                    student_service.create_student(db, class_id, row.get("name"), row.get("nis"))
                    added += 1
                except AppError as exc:
                    skipped += 1
                    logger.warning("Line %d skipped: %s", line_no, exc.message)
    finally:
        if owns_session:
            db.close()
    return {"added": added, "skipped": skipped}


def main():
    parser = argparse.ArgumentParser(description="Import a class roster from CSV")
    parser.add_argument("class_id", type=int, help="class id (1..6)")
    parser.add_argument("--csv", default=CSV_PATH, help="CSV file with name,nis columns")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    init_db()
    result = import_students(args.class_id, args.csv)
    print(f"✅ Students CSV -> DB import done: {result['added']} added, {result['skipped']} skipped")


if __name__ == "__main__":
    main()
