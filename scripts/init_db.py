from database.db import init_db, FIXED_CLASSES, DEFAULT_SUBJECTS


def main():
    init_db()
    print(f"✅ Schema ready: {len(FIXED_CLASSES)} classes, {len(DEFAULT_SUBJECTS)} default subjects per class")


if __name__ == "__main__":
    main()
