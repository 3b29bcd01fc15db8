"""Allow ``python -m shadowsync.cli`` execution."""

from shadowsync.cli.commands import main

main()
