"""LearnerMax API - lesson access, playback credentials and completion tracking."""

__version__ = "0.1.0"
