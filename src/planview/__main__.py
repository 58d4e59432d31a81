"""Allow ``python -m planview``."""

from planview.cli.main import app

app(prog_name="planview")
