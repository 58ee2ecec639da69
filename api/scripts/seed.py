import argparse
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from blackout.database import Base, SessionLocal, engine
from blackout import models  # noqa: F401
from blackout.services.seeding import seed_dummy_pool


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed a dummy Blackout matching pool")
    parser.add_argument("--n-users", type=int, default=40)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--reset", action="store_true")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        summary = seed_dummy_pool(db, n_users=args.n_users, seed=args.seed, reset=args.reset)

    print("Seed completed")
    for k, v in summary.items():
        print(f"- {k}: {v}")


if __name__ == "__main__":
    main()
