"""polyscribe: audio transcription through interchangeable cloud backends."""

__version__ = "0.1.0"
