"""Core pipeline: pronoun rewriting, markdown rendering, class injection, and story customization."""
