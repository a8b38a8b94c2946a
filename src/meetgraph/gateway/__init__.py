"""Chat gateways that forward slash commands to :class:`ChatCommands`."""
