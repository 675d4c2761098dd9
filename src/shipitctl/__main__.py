"""Allow running as ``python -m shipitctl``."""

from shipitctl.cli import app

app(prog_name="shipitctl")
