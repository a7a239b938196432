"""HandBrake job action.

Decides whether a media file already complies with a target encoding
profile and, when it does not, supervises a HandBrakeCLI transcode with
progress reporting and cooperative cancellation.
"""

__version__ = "0.1.0"
