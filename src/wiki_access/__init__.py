"""Role and client scoped filtering of documentation page trees."""
