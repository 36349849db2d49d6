"""Package entry point for ``python -m inkwell``.

WHY: Users run the reader tools as ``python -m inkwell annotate book.txt``
or ``python -m inkwell serve`` without installing console scripts.

HOW: Delegates straight to the CLI's main() function, which dispatches
on the subcommand.
"""

from inkwell.cli import main

if __name__ == "__main__":
    main()
