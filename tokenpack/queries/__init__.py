"""Tree-sitter query files for import extraction."""
