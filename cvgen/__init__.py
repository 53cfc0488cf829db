"""
cvgen - multi-tenant CV generation pipeline

Turns a person's structured profile data plus a template variant and language
into a rendered PDF by staging the inputs into an isolated job workspace and
delegating rendering to an external document compiler (Typst by default).

Architecture:
- Intake Context: Person directories, language handling, asset resolution
- Templating Context: Template variant registry and person scaffolding
- Rendering Context: Job workspaces, compiler invocation, output management
- Generation Context: Job orchestration (one-shot generate and watch)
"""

__version__ = "0.1.0"
