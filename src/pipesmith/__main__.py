"""Allow ``python -m pipesmith``."""

from pipesmith.ui.cli import main


if __name__ == "__main__":
    main()
