"""Main CLI application using Cyclopts."""

import cyclopts

from namewatch.cli.commands import config, replay

app = cyclopts.App(
    name="namewatch",
    help="namewatch - one-shot notifications when bus names lose their owner",
)

app.command(config.app, name="config")
app.command(replay.app, name="replay")
