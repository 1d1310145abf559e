"""visionsnap -- Snap a photo, stream a vision model's description of it.

The package has two halves: a relay server that forwards an encoded
image to a cloud vision-language model and re-emits its answer as an
event stream, and a capture client that owns the camera, encodes
frames, and renders the streamed answer as it arrives.
"""

__version__ = "0.1.0"
