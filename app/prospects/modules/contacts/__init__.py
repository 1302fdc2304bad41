"""
Contacts module.

Scope:
- Contacts CRUD over the `contacts` table (list + create + update + delete)
- Inline single-field edits and the markdown viewer for brief/notes
- JSON import (skip-invalid, one atomic bulk insert) and JSON export
"""
