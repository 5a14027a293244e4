"""
Kanban lists backend package.

Lists are the columns of a board: this package stores them, gates their
changes by board membership, records their lifecycle activities, clones them
with their cards and checklists, and serves them over HTTP.
"""
