"""Module wrapper so running ``python -m reana_client.cli`` matches the console script."""

from reana_client.cli import main


if __name__ == "__main__":  # pragma: no cover
    main(prog_name="reana-client")
