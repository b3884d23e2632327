"""
Smart Tagger - batch audio tag editing for MP3 and M4A files.

This package provides tools to:
- Read and write artist/album/title/track/disc tags behind one interface
- Number a folder of tracks from the digits in their filenames
- Apply a confirmed batch of tags across a folder in parallel
- Rename files into numbered sequences and convert AAC files with ffmpeg
"""

__version__ = "1.0.0"
