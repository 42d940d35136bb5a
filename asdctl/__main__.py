from asdctl.cli import run

run()
