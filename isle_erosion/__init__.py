"""Island erosion engine for a sinking-island word-search game."""
