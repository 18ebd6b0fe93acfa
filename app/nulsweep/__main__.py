"""Allow running nulsweep as ``python -m nulsweep``."""

from nulsweep.cli.main import app

if __name__ == "__main__":
    app(prog_name="nulsweep")
