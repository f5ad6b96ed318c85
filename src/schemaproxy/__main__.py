"""Entry point for 'python -m schemaproxy'."""

from schemaproxy.cli import main

if __name__ == "__main__":
    main()
