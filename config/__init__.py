"""config package: waiter configuration schema and YAML loader."""
