"""Kingdom simulation core: state, rules and static tables (no UI)."""
