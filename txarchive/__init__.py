"""
txarchive - accumulate bank transaction exports into a local archive.

Banks only export a bounded window of history. Running txarchive regularly
merges each export into one deduplicated CSV per account, so the archive
keeps growing past the bank's limit.
"""

__version__ = "0.1.0"
