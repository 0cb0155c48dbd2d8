"""pintmerge - cherry-pick one commit onto a set of release branches."""

__version__ = "0.1.0"
