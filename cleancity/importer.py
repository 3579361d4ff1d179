# CleanCity Issue Desk: seed data importer
# Loads the default worker roster and demo issues into the configured store
#
# Usage:  python -m cleancity.importer

from .config import STORE_BACKEND, DATA_FILE, MONGODB_URL, MONGODB_DB
from .seed.issues import import_issues, DEMO_ISSUES
from .store import open_store
from .workers import seed_default_workers


def main():
    print("=" * 64)
    print("  CleanCity Issue Desk: Data Importer")
    print("=" * 64)

    # ------------------------------------------------------------------
    # 1. Open store
    # ------------------------------------------------------------------
    print(f"\n[1/3] Opening {STORE_BACKEND} store...")
    store = open_store(STORE_BACKEND, data_file=DATA_FILE,
                       mongodb_url=MONGODB_URL, mongodb_db=MONGODB_DB)

    try:
        # --------------------------------------------------------------
        # 2. Workers
        # --------------------------------------------------------------
        print("\n[2/3] Workers")
        workers = seed_default_workers(store)
        for w in workers:
            print(f"    {w.id:10s}  {w.role.value:12s}  {'active' if w.active else 'inactive'}")

        # --------------------------------------------------------------
        # 3. Issues (skipped when the store already has some)
        # --------------------------------------------------------------
        print("\n[3/3] Issues")
        existing = store.list_issues()
        if existing:
            print(f"  SKIP  store already holds {len(existing)} issues")
            n_issues = 0
        else:
            n_issues = len(import_issues(store))
    finally:
        store.close()

    print("\n" + "=" * 64)
    print("  IMPORT COMPLETE")
    print("=" * 64)
    print(f"  Workers: {len(workers)}")
    print(f"  Issues:  {n_issues} of {len(DEMO_ISSUES)} demo issues")
    print("=" * 64)


if __name__ == "__main__":
    main()
