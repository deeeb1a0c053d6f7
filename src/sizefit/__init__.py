"""sizefit: fit a media file into a target size with ffmpeg."""

__version__ = "0.1.0"
