"""Q·V·Q⁻¹ viewer: pseudo and Hamilton quaternion conjugation side by side."""

__version__ = "0.1.0"
