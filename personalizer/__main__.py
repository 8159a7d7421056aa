"""Entry point for ``python -m personalizer <command>``.

Commands:
    doctor   – check Python, deps, story catalog, story files, link store
    stories  – list the story catalog and pronoun families
    render   – render a customized story (catalog key or local markdown file)
    serve    – run the API with uvicorn
"""
from personalizer.cli import main

if __name__ == "__main__":
    main()
