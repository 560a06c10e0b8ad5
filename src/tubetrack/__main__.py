"""Allow ``python -m tubetrack`` to launch the CLI."""

from tubetrack.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
