"""ops package: fatal path and operator kill switch."""
