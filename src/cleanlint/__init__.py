"""
cleanlint - Clean-code style checker for Python sources.

Detects violations of the clean-coding guide:
- Conditionals (boolean comparisons, magic literals, negative conditionals)
- Method design (parameter counts, flag arguments, length, nesting depth)
- Naming (short names, encoded names, conventions, noise words)
- Class cohesion and size
- Comments (commented-out code, debt markers)
- Exception handling (bare and swallowed exceptions)
- Guide documents (every "Bad" example paired with a "Good" one)

Usage:
    python -m cleanlint [root]
    python -m cleanlint --json
    python -m cleanlint --errors-only
    python -m cleanlint --watch
"""

__version__ = "1.0.0"
