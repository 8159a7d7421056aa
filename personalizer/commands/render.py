"""``personalizer render`` - render a customized story from the command line.

Two modes:
    personalizer render island-of-almosts --name Riley --pronoun they
    personalizer render --file draft.md --original-name Sam --original-pronoun he --pronoun she
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

RENDER_ENGINES = ("basic", "markdown")


def register(subparsers) -> None:
    p = subparsers.add_parser("render", help="Render a customized story to HTML")
    p.add_argument("story", nargs="?", help="Story key from the catalog")
    p.add_argument("--file", type=str, help="Render a local markdown file instead of a catalog story")
    p.add_argument("--name", "-n", type=str, help="Protagonist name to use")
    p.add_argument("--pronoun", "-p", type=str, help="Pronoun family: he, she or they")
    p.add_argument("--original-name", type=str, help="Protagonist name as written in --file")
    p.add_argument("--original-pronoun", type=str, default="he", help="Pronoun family --file is written in (default: he)")
    p.add_argument("--engine", choices=RENDER_ENGINES, default=None, help="Renderer (default: PERSONALIZER_RENDER_ENGINE or basic)")
    p.add_argument("--page", action="store_true", help="Emit the full HTML page instead of the fragment")
    p.add_argument("--out", type=str, help="Write output to this file instead of stdout")
    p.set_defaults(func=run)


def _render_file(args, engine: str):
    from backend.app.core.customize import build_banner, normalize_target_name, personalize_markdown, resolve_pronoun
    from backend.app.models.story import RenderedStory, StoryMetadata

    path = Path(args.file)
    story = StoryMetadata(
        key=path.stem,
        title=path.stem.replace("-", " ").replace("_", " ").title(),
        original_name=args.original_name,
        original_pronoun=args.original_pronoun,
    )
    pronoun = resolve_pronoun(args.pronoun, story)
    name = normalize_target_name(args.name)
    html_fragment = personalize_markdown(path.read_text(encoding="utf-8"), story, name, pronoun, engine)
    return RenderedStory(
        metadata=story,
        html=html_fragment,
        banner=build_banner(story, name, pronoun),
        target_name=name if name and name != story.original_name else None,
        pronoun=pronoun,
    )


def run(args) -> int:
    if not args.story and not args.file:
        print("  ERROR: Provide a story key or --file")
        print("  Usage: personalizer render <story> [--name N] [--pronoun P]")
        print("     or: personalizer render --file story.md --original-name N [--pronoun P]")
        return 1
    if args.file:
        if not Path(args.file).is_file():
            print(f"  ERROR: File not found: {args.file}")
            return 1
        if not args.original_name:
            print("  ERROR: --original-name is required with --file")
            return 1

    from backend.app.config import current_render_engine
    from backend.app.content.source import build_story_source
    from backend.app.core.customize import customize
    from backend.app.core.document_shell import render_page
    from backend.app.core.error_handling import CustomizationError

    engine = args.engine or current_render_engine()
    try:
        if args.file:
            story = _render_file(args, engine)
        else:
            story = asyncio.run(
                customize(args.story, args.name, args.pronoun, source=build_story_source(), engine=engine)
            )
    except CustomizationError as e:
        print(f"  ERROR: {e.message}")
        return 1
    except ValueError as e:
        print(f"  ERROR: {e}")
        return 1

    output = render_page(story) if args.page else story.html
    if args.out:
        Path(args.out).write_text(output + "\n", encoding="utf-8")
        if story.banner:
            print(story.banner)
        print(f"  Wrote {args.out}")
    else:
        sys.stdout.write(output + "\n")
    return 0
