"""``personalizer doctor`` - environment health check.

Checks: Python version, deps installed, story catalog readable, a markdown file
for every catalog story (or a remote source configured), templates present,
link store directory writable.
"""
from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

# ANSI helpers (no-op on dumb terminals)
_COLOR = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _ok(msg: str) -> str:
    return f"  [OK]   {msg}" if not _COLOR else f"  \033[32m[OK]\033[0m   {msg}"


def _warn(msg: str) -> str:
    return f"  [WARN] {msg}" if not _COLOR else f"  \033[33m[WARN]\033[0m {msg}"


def _fail(msg: str) -> str:
    return f"  [FAIL] {msg}" if not _COLOR else f"  \033[31m[FAIL]\033[0m {msg}"


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


def register(subparsers) -> None:
    p = subparsers.add_parser("doctor", help="Check environment health")
    p.set_defaults(func=run)


def _check_python() -> bool:
    v = sys.version_info
    ok = v >= (3, 10)
    line = f"Python {v.major}.{v.minor}.{v.micro}"
    print(_ok(line) if ok else _fail(f"{line} - need 3.10+"))
    return ok


def _check_deps() -> list[str]:
    required = ["fastapi", "uvicorn", "pydantic", "yaml", "httpx", "markdown", "bs4"]
    missing = []
    for mod in required:
        try:
            if importlib.util.find_spec(mod) is None:
                missing.append(mod)
        except (ImportError, ValueError):
            missing.append(mod)
    if missing:
        print(_fail(f"Missing packages: {', '.join(missing)}"))
        print("         Run: pip install -e .")
    else:
        print(_ok(f"All {len(required)} required packages installed"))
    return missing


def _check_catalog() -> list:
    from backend.app.config import STORY_METADATA_PATH
    from backend.app.content.catalog import list_stories

    if not STORY_METADATA_PATH.exists():
        print(_fail(f"Story catalog missing: {STORY_METADATA_PATH}"))
        return []
    stories = list_stories()
    if stories:
        print(_ok(f"Story catalog: {len(stories)} stories ({STORY_METADATA_PATH})"))
    else:
        print(_fail(f"Story catalog has no valid entries: {STORY_METADATA_PATH}"))
    return stories


def _check_story_files(stories: list) -> bool:
    from backend.app.config import STORY_DIR, STORY_SOURCE_URL

    if STORY_SOURCE_URL:
        print(_ok(f"Remote story source: {STORY_SOURCE_URL} (not probed)"))
        return True
    all_ok = True
    for story in stories:
        path = STORY_DIR / f"{story.key}.md"
        if path.is_file():
            print(_ok(f"Story file: {path.name}"))
        else:
            print(_fail(f"Story file missing: {path}"))
            all_ok = False
    return all_ok


def _check_templates() -> bool:
    from backend.app.config import TEMPLATE_DIR

    all_ok = True
    for name in ("story_page.html", "story.css"):
        path = TEMPLATE_DIR / name
        if path.is_file():
            print(_ok(f"Template: {name}"))
        else:
            print(_fail(f"Template missing: {path}"))
            all_ok = False
    return all_ok


def _check_db_writable() -> bool:
    from backend.app.config import DEFAULT_DB_PATH

    db_dir = Path(DEFAULT_DB_PATH).parent
    if not db_dir.exists():
        print(_warn(f"{db_dir} does not exist yet (created on first start)"))
        return True
    test_file = db_dir / ".doctor_test"
    try:
        test_file.write_text("ok")
        test_file.unlink()
        print(_ok(f"{db_dir} is writable"))
        return True
    except OSError as e:
        print(_fail(f"{db_dir} not writable: {e}"))
        return False


def run(args) -> int:
    print(_section("Story Personalizer Doctor"))
    errors = 0

    if not _check_python():
        errors += 1

    if _check_deps():
        # Remaining checks import the backend
        print()
        print(_fail("Install dependencies before running the remaining checks"))
        return 1

    stories = _check_catalog()
    if not stories:
        errors += 1

    if not _check_story_files(stories):
        errors += 1

    if not _check_templates():
        errors += 1

    if not _check_db_writable():
        errors += 1

    print()
    if errors == 0:
        print(_ok("All checks passed - ready to serve!"))
        return 0
    print(_fail(f"{errors} issue(s) found - see above for fixes"))
    return 1
