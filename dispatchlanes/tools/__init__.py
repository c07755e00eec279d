"""dispatchlanes.tools package

Developer utilities (benchmarks).

Keep this package's __init__ free of eager imports so `python -m` execution
has no import-time side effects.
"""

__all__: list[str] = []
