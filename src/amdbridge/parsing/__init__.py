"""JavaScript parsing: tree-sitter front end, scope-aware collector and string codec."""
