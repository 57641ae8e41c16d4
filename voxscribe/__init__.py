"""
Voxscribe - pick an audio file, get its transcription.

Wraps a local whisper.cpp command-line engine behind a small
selection/transcription state machine, with a Rich terminal front end.
"""

__version__ = "0.1.0"
