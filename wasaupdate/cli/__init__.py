"""CLI package for wasaupdate."""
