"""
codequest - Learn a language by building a project one validated task at a time.

Packages:
- schemas: pydantic models for plan.json / state.json
- classroom: rule engine, progress store, task navigator, templates
- feedback: hint/review generation and inline annotation patching
- viewer: plain-text rendering for the CLI
"""

__version__ = "0.1.0"
