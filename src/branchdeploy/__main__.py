"""
Main entry point for the branchdeploy CLI application.

This module loads the environment and runs the deploy command.
"""

import logging
import sys

from dotenv import find_dotenv, load_dotenv

from branchdeploy.commands.deploy import app


def main() -> None:
    """
    Main entry point for the application.

    This function loads environment variables and runs the Typer application.
    Any error that escapes the command is logged and ends the process with
    exit code 1.
    """
    load_dotenv(find_dotenv(usecwd=True))
    try:
        app()
    except Exception:
        logging.getLogger(__name__).critical("Unhandled error", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    main()
