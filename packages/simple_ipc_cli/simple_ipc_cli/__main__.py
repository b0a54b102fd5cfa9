"""Allow ``python -m simple_ipc_cli``."""

from simple_ipc_cli.main import app

app(prog_name="simple-ipc")
