"""Entry point wrapper for ``python -m circle_of_fifths``.

Example
-------
::

    python -m circle_of_fifths --key A --mode minor --progression i-iv-V-i
"""

from .cli import main

if __name__ == "__main__":
    main()
