"""RestForge — expose relational tables as a versioned REST API.

Resources are discovered from a controllers directory, one directory per
resource and one file per action. `restforge forge <entity>` writes new
action files from templates.
"""

__version__ = "0.1.0"
