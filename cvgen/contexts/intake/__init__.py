"""
Intake Context

Responsibilities:
- Normalizes person identifiers and language codes
- Lists person data directories and stores profile pictures
- Validates uploaded profile pictures
- Resolves every asset a generation job needs before any work starts

Owns: Person directory layout, language table, asset resolution
Never: Copies files into workspaces or runs the compiler
"""
