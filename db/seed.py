import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

SCRIPT_DIR = Path(__file__).resolve().parent
sys.path = [path for path in sys.path if Path(path).resolve() != SCRIPT_DIR]

REPO_ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = REPO_ROOT / "backend"
sys.path.insert(0, str(REPO_ROOT))
sys.path.insert(0, str(BACKEND_DIR))

from catalog.seeding import MONSTERS, SPELLS, SeedTable, seed_all  # noqa: E402
from db import create_session_factory  # noqa: E402

log = logging.getLogger("seed")

DATA_DIR = Path(os.getenv("SEED_DATA_DIR", str(REPO_ROOT / "coreData")))


def load_json(file_name: str, data_dir: Path = DATA_DIR) -> Any | None:
    path = data_dir / file_name
    if not path.exists():
        log.warning("Missing %s, skipping.", path)
        return None
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def seed_file(session, table: SeedTable, file_name: str, data_dir: Path = DATA_DIR) -> bool:
    data = load_json(file_name, data_dir)
    if data is None:
        return True
    log.info("Loaded %s from %s", table.plural, file_name)
    result = seed_all(session, table, data)
    return not result.errors


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    session_factory = create_session_factory()
    with session_factory() as session:
        ok = seed_file(session, MONSTERS, "monsters.json")
        ok = seed_file(session, SPELLS, "spells.json") and ok
    if not ok:
        log.error("Seeding finished with errors.")
        return 1
    log.info("Database seeding complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
