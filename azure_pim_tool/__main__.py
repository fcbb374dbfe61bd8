"""
Entry point for the Azure PIM Tool package.
Allows running the CLI as: python -m azure_pim_tool
"""

from .cli import main

if __name__ == "__main__":
    main()
