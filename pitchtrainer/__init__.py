"""
PitchTrainer - evaluation service for short networking pitches.

Transcribes a recorded 45 or 60 second pitch, has a language model score it
against a fixed weighted rubric, and normalizes the model's answer into a
complete, bounded result.
"""

__version__ = "1.0.0"
__author__ = "PitchTrainer Team"
