import argparse
import os
import sys
from sqlalchemy.orm import Session

# Add project root to sys.path
sys.path.append(os.getcwd())

from models import get_engine, Base
from reference_model import load_reference_model
from reference_model.config import EXCEL_FILE, load_settings
from services import ReferenceModelService


def init_db(input_file=EXCEL_FILE, settings=None):
    if settings is None:
        settings = load_settings()

    print("Initializing Database...")
    engine = get_engine(settings.db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    print("Loading data from Excel...")
    result = load_reference_model(input_file, settings=settings)
    if not result.ok:
        print(f"Error loading data: {result.error}", file=sys.stderr)
        return False

    model = result.value
    print(f"Inserting {len(model['reference_model']['artifacts'])} artifacts "
          f"and {len(model['glossary'])} glossary terms...")

    with Session(engine) as session:
        ReferenceModelService(session).store(model)

    print("Database populated successfully.")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load the TMF Reference Model into the browse database")
    parser.add_argument("input", nargs="?", default=EXCEL_FILE, help="Reference model .xlsx file")
    parser.add_argument("--db-url", help="SQLAlchemy database URL")
    args = parser.parse_args()

    overrides = {"db_url": args.db_url} if args.db_url else {}
    ok = init_db(args.input, load_settings(**overrides))
    sys.exit(0 if ok else 1)
