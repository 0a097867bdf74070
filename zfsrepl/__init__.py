"""
zfsrepl: ZFS dataset directory, property access and send/receive replication
driven through the zfs command line tool.
"""

__version__ = "1.0.0"
