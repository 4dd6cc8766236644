"""Services for git-plugin-keeper."""
