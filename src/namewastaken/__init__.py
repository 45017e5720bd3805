"""
namewastaken

Check whether a username is already taken on X/Twitter, TikTok, Threads,
YouTube, Instagram, Facebook, Telegram and GitHub. Usable as a CLI, an MCP
server (stdio or HTTP, with a small JSON API) or a library (namewastaken.sdk).
"""

__version__ = "1.0.0"


def main():
    """Main entry point for the CLI."""
    import sys

    from .cli import main as cli_main

    sys.exit(cli_main())
