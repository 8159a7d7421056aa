"""`personalizer stories` - list the story catalog and the pronoun families."""
from __future__ import annotations


def register(subparsers) -> None:
    p = subparsers.add_parser("stories", help="List customizable stories and pronoun families")
    p.set_defaults(func=run)


def run(args) -> int:
    from backend.app.config import STORY_METADATA_PATH
    from backend.app.content.catalog import list_stories
    from backend.app.core.pronouns import PRONOUN_FAMILIES, PRONOUN_FORMS, valid_pronoun_keys

    stories = list_stories()
    print(f"Stories ({STORY_METADATA_PATH}):")
    print()
    if not stories:
        print("  (none - add entries to the catalog)")
    for story in stories:
        print(f"- {story.key}: {story.title}")
        print(f"    protagonist={story.original_name} pronouns={story.original_pronoun}")
        if story.description:
            print(f"    {story.description}")

    print("\nPronoun families:")
    for key in valid_pronoun_keys():
        family = PRONOUN_FAMILIES[key]
        forms = "/".join(family.form(f) for f in PRONOUN_FORMS)
        print(f"- {key}: {forms}")

    print("\nCustomize over HTTP:")
    print("  GET /in/to/<story>?n=<name>&p=<he|she|they>")
    return 0
