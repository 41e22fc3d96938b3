"""
reverse-db

Entry point for the reverse-db script.
"""

from reverse_db.cli import main

if __name__ == "__main__":
    main()
