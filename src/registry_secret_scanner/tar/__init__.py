"""Layer archive handling."""
