"""``personalizer serve`` - run the FastAPI backend with uvicorn."""
from __future__ import annotations

import os


def register(subparsers) -> None:
    p = subparsers.add_parser("serve", help="Run the story API (uvicorn)")
    p.add_argument("--host", type=str, default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    p.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    p.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    p.add_argument("--engine", choices=("basic", "markdown"), help="Override PERSONALIZER_RENDER_ENGINE")
    p.set_defaults(func=run)


def run(args) -> int:
    try:
        import uvicorn
    except ImportError:
        print("  ERROR: uvicorn is not installed")
        print("         Run: pip install -e .")
        return 1

    if args.engine:
        # Config is read at import time; set before the app module loads.
        os.environ["PERSONALIZER_RENDER_ENGINE"] = args.engine

    print(f"  Serving on http://{args.host}:{args.port}  (Ctrl-C to stop)")
    uvicorn.run("backend.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0
