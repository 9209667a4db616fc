"""Run the console shell: python -m branch_ledger"""

from .cli import main


main()
