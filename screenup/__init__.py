"""
Screen Upload - watch a folder, upload new screenshots over SFTP,
put the public URL on the clipboard.
"""

__version__ = "1.0.0"
