"""
Data Migration Script: legacy key/value file -> local document store

Copies tasks, audit entries and the theme preference once. Running it again
is a no-op; the legacy file is left unchanged.

Usage:
    python scripts/migrate_legacy.py [/path/to/legacy.json] [sqlite:///./zero_task_local.db]
"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.config import get_settings
from backend.storage.document_store import DocumentStore
from backend.storage.legacy_store import LegacyKeyValueStore
from backend.storage.migration import migrate_once


async def main(args: list[str]) -> int:
    settings = get_settings()
    legacy_path = args[0] if args else settings.LEGACY_STORE_PATH
    target_url = args[1] if len(args) > 1 else settings.LOCAL_DATABASE_URL

    legacy = LegacyKeyValueStore(legacy_path)
    if not legacy.exists:
        print(f"No legacy store at {legacy_path}; nothing to copy")

    async with DocumentStore(target_url) as store:
        result = await migrate_once(legacy, store)

    print("=" * 60)
    if result.skipped:
        print("Migration already completed earlier, nothing copied")
    elif result.completed:
        print(f"Tasks migrated:        {result.tasks}")
        print(f"Audit entries migrated: {result.logs}")
        print(f"Theme:                 {result.theme or '-'}")
    else:
        print("Migration FAILED, will retry on next run:")
        for error in result.errors:
            print(f"  - {error}")
    print("=" * 60)
    return 0 if result.completed else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main(sys.argv[1:])))
