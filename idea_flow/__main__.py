"""Main module.

This module belongs to `idea_flow` in the idea-flow codebase.
"""

from idea_flow.launch import main


if __name__ == "__main__":
    raise SystemExit(main())
