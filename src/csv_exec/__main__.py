"""Module entrypoint for `python -m csv_exec`."""

from csv_exec.main import main


if __name__ == "__main__":  # pragma: no cover - exercised via CLI tests
    main()
