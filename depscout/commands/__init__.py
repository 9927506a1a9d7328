"""Click subcommands of the depscout CLI."""
