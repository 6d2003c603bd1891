"""HTTP surface for the backup system and the lead import."""
