"""
Main entry point for the livebox_client package.

Allows running the CLI as: python -m livebox_client
"""

from livebox_client.cli import main

if __name__ == "__main__":
    main()
